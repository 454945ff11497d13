"""Inputs and results exchanged with the lifecycle services."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

from services.warranty.models import (
    ClaimStatus,
    CoverageType,
    DamageType,
    Device,
    Warranty,
    WarrantyStatus,
)


@dataclass
class DeviceRegistration:
    """Registration request for a device and its warranty."""

    imei: str
    fiscal_number: str
    model: str
    brand: str
    purchase_date: date | datetime
    owner_cpf_cnpj: str
    owner_name: str
    owner_email: str
    owner_phone: str
    photos: list[str]

    def audit_metadata(self) -> dict[str, Any]:
        """Request snapshot for the audit trail, photos reduced to a count."""
        data = asdict(self)
        data["photo_count"] = len(data.pop("photos"))
        data["purchase_date"] = str(self.purchase_date)
        return data


@dataclass
class WarrantyValidation:
    """Lookup keys for a warranty validation."""

    model: str
    owner_cpf_cnpj: str
    imei: str | None = None
    fiscal_number: str | None = None

    @property
    def identifier(self) -> str | None:
        """IMEI when given, else the fiscal number."""
        return self.imei or self.fiscal_number


@dataclass
class ClaimSubmission:
    """A customer's claim against a device's active warranty."""

    device_id: str
    damage_type: DamageType
    damage_description: str
    incident_date: date | datetime
    customer_name: str
    customer_cpf: str
    customer_phone: str
    customer_email: str
    evidence_photos: list[str] = field(default_factory=list)
    documents: list[str] = field(default_factory=list)


@dataclass
class DeviceSummary:
    id: str
    imei: str
    model: str
    brand: str

    @classmethod
    def from_device(cls, device: Device) -> DeviceSummary:
        return cls(id=device.id or "", imei=device.imei, model=device.model, brand=device.brand)


@dataclass
class WarrantySummary:
    id: str
    policy_number: str
    status: WarrantyStatus
    coverage_type: CoverageType
    start_date: datetime
    end_date: datetime
    max_claims: int
    used_claims: int
    remaining_claims: int

    @classmethod
    def from_warranty(cls, warranty: Warranty) -> WarrantySummary:
        return cls(
            id=warranty.id or "",
            policy_number=warranty.policy_number,
            status=warranty.status,
            coverage_type=warranty.coverage_type,
            start_date=warranty.start_date,
            end_date=warranty.end_date,
            max_claims=warranty.max_claims,
            used_claims=warranty.used_claims,
            remaining_claims=warranty.remaining_claims,
        )


@dataclass
class RegistrationResult:
    success: bool
    device: DeviceSummary
    warranty: WarrantySummary
    message: str
    email_sent: bool


@dataclass
class ValidationResult:
    is_valid: bool
    message: str
    device: DeviceSummary | None = None
    warranty: WarrantySummary | None = None


@dataclass
class ClaimDetails:
    """A claim with its device and warranty references expanded."""

    id: str
    protocol_number: str
    status: ClaimStatus
    damage_type: DamageType
    damage_description: str
    incident_date: datetime
    customer_name: str
    customer_cpf: str
    customer_phone: str
    customer_email: str
    evidence_photos: list[str]
    documents: list[str]
    created_at: datetime | None
    completion_date: datetime | None
    device: DeviceSummary | None
    warranty: WarrantySummary | None
