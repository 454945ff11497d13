"""
Claims API Endpoints.

Claim submission, lookup by protocol number and status management.
"""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import EmailStr, Field

from services.warranty.dependencies import get_claims_service, get_client_ip
from services.warranty.lifecycle import (
    ClaimDetails,
    ClaimsLifecycleService,
    ClaimSubmission,
)
from services.warranty.models import ClaimStatus, DamageType
from shared.models import CamelModel


router = APIRouter(prefix="/claims", tags=["claims"])


class ClaimSubmitRequest(CamelModel):
    """Request to file a claim against a device's warranty."""

    device_id: str = Field(..., min_length=1)
    damage_type: DamageType
    damage_description: str = Field(..., min_length=1)
    incident_date: date
    customer_name: str = Field(..., min_length=1)
    customer_cpf: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1)
    customer_email: EmailStr
    evidence_photos: list[str] = Field(default_factory=list)
    documents: list[str] = Field(default_factory=list)


class ClaimStatusUpdateRequest(CamelModel):
    """Request to change a claim's status."""

    status: ClaimStatus
    admin_notes: str | None = None


class ClaimDeviceOut(CamelModel):
    imei: str
    model: str
    brand: str


class ClaimWarrantyOut(CamelModel):
    policy_number: str
    remaining_claims: int


class ClaimResponse(CamelModel):
    """Claim details response."""

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
    completion_date: datetime | None = None
    device: ClaimDeviceOut | None
    warranty: ClaimWarrantyOut | None

    @classmethod
    def from_details(cls, details: ClaimDetails) -> ClaimResponse:
        """Create response from ClaimDetails."""
        return cls(
            id=details.id,
            protocol_number=details.protocol_number,
            status=details.status,
            damage_type=details.damage_type,
            damage_description=details.damage_description,
            incident_date=details.incident_date,
            customer_name=details.customer_name,
            customer_cpf=details.customer_cpf,
            customer_phone=details.customer_phone,
            customer_email=details.customer_email,
            evidence_photos=details.evidence_photos,
            documents=details.documents,
            created_at=details.created_at,
            completion_date=details.completion_date,
            device=(
                ClaimDeviceOut(
                    imei=details.device.imei,
                    model=details.device.model,
                    brand=details.device.brand,
                )
                if details.device
                else None
            ),
            warranty=(
                ClaimWarrantyOut(
                    policy_number=details.warranty.policy_number,
                    remaining_claims=details.warranty.remaining_claims,
                )
                if details.warranty
                else None
            ),
        )


class DamageTypeOption(CamelModel):
    value: DamageType
    label: str


@router.post(
    "",
    response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a warranty claim",
)
async def submit_claim(
    request: ClaimSubmitRequest,
    service: ClaimsLifecycleService = Depends(get_claims_service),
    ip_address: str = Depends(get_client_ip),
) -> ClaimResponse:
    """
    Submit a claim against the device's active warranty.

    Consumes one claim from the warranty's quota.
    """
    details = await service.create_claim(
        ClaimSubmission(
            device_id=request.device_id,
            damage_type=request.damage_type,
            damage_description=request.damage_description,
            incident_date=request.incident_date,
            customer_name=request.customer_name,
            customer_cpf=request.customer_cpf,
            customer_phone=request.customer_phone,
            customer_email=str(request.customer_email),
            evidence_photos=request.evidence_photos,
            documents=request.documents,
        ),
        ip_address=ip_address,
    )
    return ClaimResponse.from_details(details)


@router.get(
    "/damage-types",
    response_model=list[DamageTypeOption],
    summary="List damage types",
)
async def get_damage_types() -> list[DamageTypeOption]:
    """Damage types a claim may report, with display labels."""
    return [DamageTypeOption(value=d, label=d.label) for d in DamageType]


@router.get(
    "/protocol/{protocol_number}",
    response_model=ClaimResponse,
    summary="Get claim by protocol number",
)
async def get_claim_by_protocol(
    protocol_number: str,
    service: ClaimsLifecycleService = Depends(get_claims_service),
) -> ClaimResponse:
    """Get claim details by protocol number."""
    details = await service.get_claim_by_protocol(protocol_number)

    if details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Claim not found with the provided protocol number",
        )

    return ClaimResponse.from_details(details)


@router.patch(
    "/{claim_id}/status",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Update claim status",
)
async def update_claim_status(
    claim_id: str,
    request: ClaimStatusUpdateRequest,
    service: ClaimsLifecycleService = Depends(get_claims_service),
    ip_address: str = Depends(get_client_ip),
) -> Response:
    """Set a claim's status. Moving to completed stamps the completion date."""
    await service.update_claim_status(
        claim_id,
        request.status,
        admin_notes=request.admin_notes,
        ip_address=ip_address,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
