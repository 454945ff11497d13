"""Email templates for customer notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from jinja2 import Template


REGISTRATION_SUBJECT = "Dispositivo Registrado com Sucesso - StarShield Garantias"


@dataclass(frozen=True)
class DeviceRegistrationEmail:
    """Data rendered into the registration confirmation email."""

    owner_name: str
    owner_email: str
    device_model: str
    device_brand: str
    imei: str
    registration_date: datetime
    policy_number: str
    coverage_end: datetime

    @property
    def subject(self) -> str:
        return REGISTRATION_SUBJECT

    def render(self) -> str:
        """Render the HTML body. User-supplied values are autoescaped."""
        return _REGISTRATION_TEMPLATE.render(
            owner_name=self.owner_name,
            device=f"{self.device_brand} {self.device_model}",
            imei=self.imei,
            registration_date=self.registration_date.strftime("%d/%m/%Y"),
            policy_number=self.policy_number,
            coverage_end=self.coverage_end.strftime("%d/%m/%Y"),
        )


_REGISTRATION_TEMPLATE = Template(
    """\
<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Dispositivo Registrado - StarShield</title>
  <style>
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background-color: #2c3e50; color: white; text-align: center; padding: 20px; }
    .content { background-color: #f9f9f9; padding: 30px; }
    .device-info { background-color: white; padding: 20px; margin: 20px 0; border-left: 4px solid #3498db; }
    .footer { text-align: center; margin-top: 20px; font-size: 12px; color: #7f8c8d; }
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>StarShield Garantias</h1>
      <h2>Dispositivo Registrado com Sucesso!</h2>
    </div>
    <div class="content">
      <p>Olá, <strong>{{ owner_name }}</strong>!</p>
      <p>Seu dispositivo foi registrado com sucesso em nosso sistema de garantias.</p>
      <div class="device-info">
        <h3>Informações do Dispositivo Registrado:</h3>
        <ul>
          <li><strong>Modelo:</strong> {{ device }}</li>
          <li><strong>IMEI:</strong> {{ imei }}</li>
          <li><strong>Data de Registro:</strong> {{ registration_date }}</li>
          <li><strong>Apólice:</strong> {{ policy_number }}</li>
          <li><strong>Cobertura até:</strong> {{ coverage_end }}</li>
        </ul>
      </div>
      <h3>Como acionar sua garantia:</h3>
      <ol>
        <li>Acesse nosso portal de garantias</li>
        <li>Vá para a seção "Acionar Sinistro"</li>
        <li>Informe os dados do seu dispositivo</li>
        <li>Descreva o problema e anexe fotos</li>
      </ol>
      <p>Obrigado por confiar na StarShield Garantias!</p>
    </div>
    <div class="footer">
      <p>Este é um e-mail automático, não responda a esta mensagem.</p>
    </div>
  </div>
</body>
</html>
""",
    autoescape=True,
)
