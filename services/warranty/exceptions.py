"""Domain errors raised by the warranty and claims lifecycle services."""

from __future__ import annotations


class WarrantyServiceError(Exception):
    """Base class for lifecycle errors. ``code`` is stable and machine-readable."""

    code = "WARRANTY_SERVICE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingIdentifierError(WarrantyServiceError):
    code = "MISSING_IDENTIFIER"


class InvalidDeviceError(WarrantyServiceError):
    code = "INVALID_DEVICE"


class DuplicateDeviceError(WarrantyServiceError):
    code = "DUPLICATE_DEVICE"


class DeviceNotFoundError(WarrantyServiceError):
    code = "DEVICE_NOT_FOUND"


class NoActiveWarrantyError(WarrantyServiceError):
    code = "NO_ACTIVE_WARRANTY"


class WarrantyExpiredError(WarrantyServiceError):
    code = "WARRANTY_EXPIRED"


class ClaimQuotaExceededError(WarrantyServiceError):
    code = "CLAIM_QUOTA_EXCEEDED"


class ClaimNotFoundError(WarrantyServiceError):
    code = "CLAIM_NOT_FOUND"


class IdentifierCollisionError(WarrantyServiceError):
    """A generated policy or protocol number kept colliding. Safe to retry."""

    code = "IDENTIFIER_COLLISION"


class RegistrationFailedError(WarrantyServiceError):
    """Device registration failed for a reason other than a business rule."""

    code = "REGISTRATION_FAILED"
