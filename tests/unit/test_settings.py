"""Tests for environment-driven configuration."""

import pytest

from shared.config import EmailMode
from shared.config.settings import EmailSettings


class TestEmailSettings:
    """Tests for EmailSettings."""

    def test_prefixed_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """EMAIL_API_KEY switches the notifier to Resend."""
        monkeypatch.setenv("EMAIL_API_KEY", "re_prefixed")
        monkeypatch.delenv("RESEND_API_KEY", raising=False)

        email = EmailSettings()

        assert email.api_key.get_secret_value() == "re_prefixed"
        assert email.mode == EmailMode.RESEND

    def test_resend_names_still_accepted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EMAIL_API_KEY", raising=False)
        monkeypatch.setenv("RESEND_API_KEY", "re_legacy")
        monkeypatch.setenv("RESEND_FROM_EMAIL", "garantias@starshield.example")

        email = EmailSettings()

        assert email.api_key.get_secret_value() == "re_legacy"
        assert email.from_address == "garantias@starshield.example"

    def test_mock_mode_without_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EMAIL_API_KEY", raising=False)
        monkeypatch.delenv("RESEND_API_KEY", raising=False)

        assert EmailSettings().mode == EmailMode.MOCK
