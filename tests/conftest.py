"""
Test Configuration
==================

Pytest fixtures for StarShield tests.
"""

import os
from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["STORE_BACKEND"] = "memory"
os.environ["RESEND_API_KEY"] = ""
os.environ["EMAIL_API_KEY"] = ""

from services.warranty.audit import AuditRecorder  # noqa: E402
from services.warranty.lifecycle import (  # noqa: E402
    ClaimsLifecycleService,
    ClaimSubmission,
    DeviceRegistration,
    RegistrationResult,
    WarrantyLifecycleService,
)
from services.warranty.models import DamageType  # noqa: E402
from services.warranty.notifications import MockNotifier  # noqa: E402
from services.warranty.store import InMemoryRecordStore  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Fresh in-memory record store for each test."""
    return InMemoryRecordStore()


@pytest.fixture
def notifier() -> MockNotifier:
    """Notifier that captures outgoing email."""
    return MockNotifier()


@pytest.fixture
def warranty_service(
    store: InMemoryRecordStore, notifier: MockNotifier
) -> WarrantyLifecycleService:
    return WarrantyLifecycleService(store=store, notifier=notifier, audit=AuditRecorder(store))


@pytest.fixture
def claims_service(store: InMemoryRecordStore) -> ClaimsLifecycleService:
    return ClaimsLifecycleService(store=store, audit=AuditRecorder(store))


@pytest.fixture
def registration() -> DeviceRegistration:
    """Sample device registration."""
    return DeviceRegistration(
        imei="123456789012345",
        fiscal_number="NF-000123",
        model="iPhone 14 Pro",
        brand="Apple",
        purchase_date=date(2024, 1, 15),
        owner_cpf_cnpj="12345678901",
        owner_name="João Silva",
        owner_email="joao.silva@example.com",
        owner_phone="+55 11 99999-0000",
        photos=["photo-front.jpg", "photo-back.jpg"],
    )


@pytest_asyncio.fixture
async def registered(
    warranty_service: WarrantyLifecycleService,
    registration: DeviceRegistration,
) -> RegistrationResult:
    """A registered device with an active warranty."""
    return await warranty_service.register_device(registration, ip_address="10.0.0.1")


@pytest.fixture
def make_submission():
    """Build a claim submission for a device."""

    def _make(device_id: str, damage_type: DamageType = DamageType.CRACKED_SCREEN) -> ClaimSubmission:
        return ClaimSubmission(
            device_id=device_id,
            damage_type=damage_type,
            damage_description="Screen cracked after a fall",
            incident_date=date(2024, 6, 1),
            customer_name="João Silva",
            customer_cpf="12345678901",
            customer_phone="+55 11 99999-0000",
            customer_email="joao.silva@example.com",
            evidence_photos=["crack-1.jpg"],
        )

    return _make


@pytest_asyncio.fixture
async def api_client(
    store: InMemoryRecordStore, notifier: MockNotifier
) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the warranty service, wired to the in-memory store."""
    from services.warranty.dependencies import get_notifier, get_record_store
    from services.warranty.main import app

    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def registration_payload() -> dict:
    """JSON body for POST /api/v1/warranty/register."""
    return {
        "imei": "123456789012345",
        "fiscalNumber": "NF-000123",
        "model": "iPhone 14 Pro",
        "brand": "Apple",
        "purchaseDate": "2024-01-15",
        "ownerCpfCnpj": "12345678901",
        "ownerName": "João Silva",
        "ownerEmail": "joao.silva@example.com",
        "ownerPhone": "+55 11 99999-0000",
        "photos": ["photo-front.jpg", "photo-back.jpg"],
    }
