"""
Warranty API Endpoints.

Device registration and warranty validation.
"""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, status
from pydantic import EmailStr, Field

from services.warranty.dependencies import get_client_ip, get_warranty_service
from services.warranty.lifecycle import (
    DeviceRegistration,
    DeviceSummary,
    RegistrationResult,
    ValidationResult,
    WarrantyLifecycleService,
    WarrantySummary,
    WarrantyValidation,
)
from services.warranty.models import MAX_PHOTOS, MIN_PHOTOS, CoverageType, WarrantyStatus
from shared.models import CamelModel


router = APIRouter(prefix="/warranty", tags=["warranty"])


class RegisterDeviceRequest(CamelModel):
    """Request to register a device and activate its warranty."""

    imei: str = Field(..., min_length=1)
    fiscal_number: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    purchase_date: date
    owner_cpf_cnpj: str = Field(..., min_length=1)
    owner_name: str = Field(..., min_length=1)
    owner_email: EmailStr
    owner_phone: str = Field(..., min_length=1)
    photos: list[str] = Field(..., min_length=MIN_PHOTOS, max_length=MAX_PHOTOS)


class ValidateWarrantyRequest(CamelModel):
    """Request to validate a device's warranty. IMEI or fiscal number is required."""

    imei: str | None = None
    fiscal_number: str | None = None
    model: str = Field(..., min_length=1)
    owner_cpf_cnpj: str = Field(..., min_length=1)


class DeviceOut(CamelModel):
    id: str
    imei: str
    model: str
    brand: str

    @classmethod
    def from_summary(cls, summary: DeviceSummary) -> DeviceOut:
        return cls(id=summary.id, imei=summary.imei, model=summary.model, brand=summary.brand)


class RegisteredWarrantyOut(CamelModel):
    id: str
    policy_number: str
    start_date: datetime
    end_date: datetime


class WarrantyStatusOut(CamelModel):
    id: str
    status: WarrantyStatus
    start_date: datetime
    end_date: datetime
    max_claims: int
    used_claims: int
    remaining_claims: int
    policy_number: str
    coverage_type: CoverageType

    @classmethod
    def from_summary(cls, summary: WarrantySummary) -> WarrantyStatusOut:
        return cls(
            id=summary.id,
            status=summary.status,
            start_date=summary.start_date,
            end_date=summary.end_date,
            max_claims=summary.max_claims,
            used_claims=summary.used_claims,
            remaining_claims=summary.remaining_claims,
            policy_number=summary.policy_number,
            coverage_type=summary.coverage_type,
        )


class RegistrationResponse(CamelModel):
    """Device registration response."""

    success: bool
    device: DeviceOut
    warranty: RegisteredWarrantyOut
    message: str
    email_sent: bool

    @classmethod
    def from_result(cls, result: RegistrationResult) -> RegistrationResponse:
        """Create response from RegistrationResult."""
        return cls(
            success=result.success,
            device=DeviceOut.from_summary(result.device),
            warranty=RegisteredWarrantyOut(
                id=result.warranty.id,
                policy_number=result.warranty.policy_number,
                start_date=result.warranty.start_date,
                end_date=result.warranty.end_date,
            ),
            message=result.message,
            email_sent=result.email_sent,
        )


class ValidationResponse(CamelModel):
    """Warranty validation response."""

    is_valid: bool
    device: DeviceOut | None = None
    warranty: WarrantyStatusOut | None = None
    message: str

    @classmethod
    def from_result(cls, result: ValidationResult) -> ValidationResponse:
        """Create response from ValidationResult."""
        return cls(
            is_valid=result.is_valid,
            device=DeviceOut.from_summary(result.device) if result.device else None,
            warranty=WarrantyStatusOut.from_summary(result.warranty) if result.warranty else None,
            message=result.message,
        )


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a device",
)
async def register_device(
    request: RegisterDeviceRequest,
    service: WarrantyLifecycleService = Depends(get_warranty_service),
    ip_address: str = Depends(get_client_ip),
) -> RegistrationResponse:
    """
    Register a device and activate a one-year warranty.

    A confirmation email is sent to the owner; delivery failure is
    reported through ``emailSent`` and does not fail the registration.
    """
    result = await service.register_device(
        DeviceRegistration(
            imei=request.imei,
            fiscal_number=request.fiscal_number,
            model=request.model,
            brand=request.brand,
            purchase_date=request.purchase_date,
            owner_cpf_cnpj=request.owner_cpf_cnpj,
            owner_name=request.owner_name,
            owner_email=str(request.owner_email),
            owner_phone=request.owner_phone,
            photos=request.photos,
        ),
        ip_address=ip_address,
    )
    return RegistrationResponse.from_result(result)


@router.post(
    "/validate",
    response_model=ValidationResponse,
    summary="Validate warranty coverage",
)
async def validate_warranty(
    request: ValidateWarrantyRequest,
    service: WarrantyLifecycleService = Depends(get_warranty_service),
    ip_address: str = Depends(get_client_ip),
) -> ValidationResponse:
    """Check whether a device currently has valid warranty coverage."""
    result = await service.validate_warranty(
        WarrantyValidation(
            imei=request.imei,
            fiscal_number=request.fiscal_number,
            model=request.model,
            owner_cpf_cnpj=request.owner_cpf_cnpj,
        ),
        ip_address=ip_address,
    )
    return ValidationResponse.from_result(result)
