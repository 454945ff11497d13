"""Warranty and claims business rules."""

from services.warranty.lifecycle.claims import ClaimsLifecycleService
from services.warranty.lifecycle.results import (
    ClaimDetails,
    ClaimSubmission,
    DeviceRegistration,
    DeviceSummary,
    RegistrationResult,
    ValidationResult,
    WarrantySummary,
    WarrantyValidation,
)
from services.warranty.lifecycle.warranty import WarrantyLifecycleService

__all__ = [
    "ClaimDetails",
    "ClaimSubmission",
    "ClaimsLifecycleService",
    "DeviceRegistration",
    "DeviceSummary",
    "RegistrationResult",
    "ValidationResult",
    "WarrantyLifecycleService",
    "WarrantySummary",
    "WarrantyValidation",
]
