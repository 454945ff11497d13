"""Tests for the warranty service HTTP API."""

import pytest
from httpx import AsyncClient

from services.warranty.notifications import MockNotifier
from services.warranty.store import AUDIT_LOGS, InMemoryRecordStore


def _validation_payload(**overrides) -> dict:
    payload = {
        "imei": "123456789012345",
        "model": "iPhone 14 Pro",
        "ownerCpfCnpj": "12345678901",
    }
    payload.update(overrides)
    return payload


def _claim_payload(device_id: str) -> dict:
    return {
        "deviceId": device_id,
        "damageType": "cracked_screen",
        "damageDescription": "Screen cracked after a fall",
        "incidentDate": "2024-06-01",
        "customerName": "João Silva",
        "customerCpf": "12345678901",
        "customerPhone": "+55 11 99999-0000",
        "customerEmail": "joao.silva@example.com",
        "evidencePhotos": ["crack-1.jpg"],
    }


async def _register(api_client: AsyncClient, payload: dict) -> dict:
    response = await api_client.post("/api/v1/warranty/register", json=payload)
    assert response.status_code == 201
    return response.json()


class TestWarrantyEndpoints:
    """Tests for /api/v1/warranty."""

    @pytest.mark.asyncio
    async def test_register(
        self,
        api_client: AsyncClient,
        registration_payload: dict,
        notifier: MockNotifier,
    ) -> None:
        """Registration returns 201 with camelCase device and warranty."""
        data = await _register(api_client, registration_payload)

        assert data["success"] is True
        assert data["emailSent"] is True
        assert data["device"]["imei"] == "123456789012345"
        assert data["warranty"]["policyNumber"].startswith("POL-")
        assert "startDate" in data["warranty"]
        assert "endDate" in data["warranty"]
        assert len(notifier.sent) == 1

    @pytest.mark.asyncio
    async def test_register_duplicate(
        self,
        api_client: AsyncClient,
        registration_payload: dict,
    ) -> None:
        await _register(api_client, registration_payload)

        response = await api_client.post("/api/v1/warranty/register", json=registration_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errorCode"] == "DUPLICATE_DEVICE"
        assert body["error"] == "Device with this IMEI or fiscal number already exists"

    @pytest.mark.asyncio
    async def test_register_with_one_photo(
        self,
        api_client: AsyncClient,
        registration_payload: dict,
        store: InMemoryRecordStore,
    ) -> None:
        """Too few photos is rejected before anything is stored."""
        registration_payload["photos"] = ["only-one.jpg"]

        response = await api_client.post("/api/v1/warranty/register", json=registration_payload)

        assert response.status_code == 400
        assert response.json()["errorCode"] == "VALIDATION_ERROR"
        assert await store.find_many(AUDIT_LOGS, {}) == []

    @pytest.mark.asyncio
    async def test_validate(
        self,
        api_client: AsyncClient,
        registration_payload: dict,
    ) -> None:
        """A registered device validates with its remaining quota."""
        registered = await _register(api_client, registration_payload)

        response = await api_client.post(
            "/api/v1/warranty/validate", json=_validation_payload()
        )

        assert response.status_code == 200
        data = response.json()
        assert data["isValid"] is True
        assert data["device"]["id"] == registered["device"]["id"]
        assert data["warranty"]["status"] == "active"
        assert data["warranty"]["maxClaims"] == 2
        assert data["warranty"]["usedClaims"] == 0
        assert data["warranty"]["remainingClaims"] == 2
        assert data["warranty"]["coverageType"] == "screen_only"

    @pytest.mark.asyncio
    async def test_validate_unknown_device(self, api_client: AsyncClient) -> None:
        """An unknown device is a 200 with isValid false."""
        response = await api_client.post(
            "/api/v1/warranty/validate", json=_validation_payload()
        )

        assert response.status_code == 200
        data = response.json()
        assert data["isValid"] is False
        assert data.get("device") is None

    @pytest.mark.asyncio
    async def test_validate_missing_identifier(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/api/v1/warranty/validate", json=_validation_payload(imei=None)
        )

        assert response.status_code == 400
        assert response.json()["errorCode"] == "MISSING_IDENTIFIER"


class TestClaimEndpoints:
    """Tests for /api/v1/claims."""

    @pytest.mark.asyncio
    async def test_submit_and_lookup(
        self,
        api_client: AsyncClient,
        registration_payload: dict,
    ) -> None:
        """A submitted claim can be fetched by its protocol number."""
        registered = await _register(api_client, registration_payload)

        response = await api_client.post(
            "/api/v1/claims", json=_claim_payload(registered["device"]["id"])
        )
        assert response.status_code == 201
        claim = response.json()
        assert claim["protocolNumber"].startswith("SGR")
        assert claim["status"] == "submitted"
        assert claim["warranty"]["remainingClaims"] == 1

        response = await api_client.get(f"/api/v1/claims/protocol/{claim['protocolNumber']}")

        assert response.status_code == 200
        found = response.json()
        assert found["id"] == claim["id"]
        assert found["device"]["imei"] == "123456789012345"
        assert found["warranty"]["policyNumber"] == registered["warranty"]["policyNumber"]

    @pytest.mark.asyncio
    async def test_submit_unknown_device(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/api/v1/claims", json=_claim_payload("missing"))

        assert response.status_code == 404
        assert response.json()["errorCode"] == "DEVICE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_submit_past_quota(
        self,
        api_client: AsyncClient,
        registration_payload: dict,
    ) -> None:
        """The third claim on a two-claim warranty is refused."""
        registered = await _register(api_client, registration_payload)
        payload = _claim_payload(registered["device"]["id"])

        for _ in range(2):
            response = await api_client.post("/api/v1/claims", json=payload)
            assert response.status_code == 201

        response = await api_client.post("/api/v1/claims", json=payload)

        assert response.status_code == 400
        assert response.json()["errorCode"] == "CLAIM_QUOTA_EXCEEDED"

    @pytest.mark.asyncio
    async def test_lookup_unknown_protocol(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/v1/claims/protocol/SGR0000000000000000")

        assert response.status_code == 404
        assert response.json()["error"] == "Claim not found with the provided protocol number"

    @pytest.mark.asyncio
    async def test_damage_types(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/v1/claims/damage-types")

        assert response.status_code == 200
        options = {o["value"]: o["label"] for o in response.json()}
        assert options["cracked_screen"] == "Tela Rachada"
        assert len(options) == 5

    @pytest.mark.asyncio
    async def test_update_status(
        self,
        api_client: AsyncClient,
        registration_payload: dict,
    ) -> None:
        """Completing a claim returns 204 and is visible on lookup."""
        registered = await _register(api_client, registration_payload)
        claim = (
            await api_client.post("/api/v1/claims", json=_claim_payload(registered["device"]["id"]))
        ).json()

        response = await api_client.patch(
            f"/api/v1/claims/{claim['id']}/status",
            json={"status": "completed", "adminNotes": "Screen replaced"},
        )
        assert response.status_code == 204

        found = (await api_client.get(f"/api/v1/claims/protocol/{claim['protocolNumber']}")).json()
        assert found["status"] == "completed"
        assert found["completionDate"] is not None

    @pytest.mark.asyncio
    async def test_update_status_unknown_claim(self, api_client: AsyncClient) -> None:
        response = await api_client.patch(
            "/api/v1/claims/missing/status", json={"status": "approved"}
        )

        assert response.status_code == 404
        assert response.json()["errorCode"] == "CLAIM_NOT_FOUND"


class TestHealthEndpoints:
    """Tests for service health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "starshield-warranty"

    @pytest.mark.asyncio
    async def test_root(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "StarShield Garantias"


class TestLifespan:
    """Tests for application startup and shutdown."""

    @pytest.mark.asyncio
    async def test_shutdown_closes_email_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The Resend HTTP client is released when the app stops."""
        import httpx

        from services.warranty import main
        from services.warranty.notifications import ResendNotifier

        notifier = ResendNotifier(
            api_key="re_test",
            from_address="garantias@starshield.example",
            base_url="https://resend.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        monkeypatch.setattr(main, "get_notifier", lambda: notifier)

        async with main.lifespan(main.app):
            assert not notifier._client.is_closed

        assert notifier._client.is_closed
