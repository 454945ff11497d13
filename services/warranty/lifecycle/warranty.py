"""
Warranty Lifecycle Service.

Registers devices with their warranty and validates warranty coverage.

Expiry is lazy: a warranty whose end date has passed is flipped to
EXPIRED the next time it is validated or claimed against. There is no
background sweep, so untouched warranties keep a stale ACTIVE status.
"""

from __future__ import annotations

from datetime import UTC, datetime

from services.warranty.audit import AuditRecorder
from services.warranty.exceptions import (
    DuplicateDeviceError,
    IdentifierCollisionError,
    MissingIdentifierError,
    RegistrationFailedError,
)
from services.warranty.lifecycle.identifiers import (
    generate_policy_number,
    insert_with_fresh_identifier,
)
from services.warranty.lifecycle.results import (
    DeviceRegistration,
    DeviceSummary,
    RegistrationResult,
    ValidationResult,
    WarrantySummary,
    WarrantyValidation,
)
from services.warranty.models import (
    AuditAction,
    AuditEntity,
    CoverageType,
    Device,
    Warranty,
    WarrantyStatus,
    add_years,
)
from services.warranty.notifications import DeviceRegistrationEmail, NotificationPort
from services.warranty.store.base import DEVICES, WARRANTIES, DuplicateKeyError, RecordStore
from shared.config import settings
from shared.config.settings import WarrantyPolicySettings
from shared.logging import get_logger


logger = get_logger(__name__)

DUPLICATE_DEVICE_MESSAGE = "Device with this IMEI or fiscal number already exists"


async def expire_warranty(store: RecordStore, warranty: Warranty) -> Warranty:
    """Persist the ACTIVE -> EXPIRED transition for a lapsed warranty."""
    await store.update_one(
        WARRANTIES,
        {"id": warranty.id},
        {"status": WarrantyStatus.EXPIRED.value},
    )
    warranty.status = WarrantyStatus.EXPIRED
    logger.info(
        "warranty_expired",
        warranty_id=warranty.id,
        policy_number=warranty.policy_number,
        end_date=warranty.end_date.isoformat(),
    )
    return warranty


class WarrantyLifecycleService:
    """
    Device registration and warranty validation.

    Features:
    - One-year screen warranty activated on registration
    - Duplicate detection by IMEI or fiscal number
    - Best-effort confirmation email
    - Lazy expiry during validation
    - Audit entry for every outcome
    """

    def __init__(
        self,
        store: RecordStore,
        notifier: NotificationPort,
        audit: AuditRecorder | None = None,
        policy: WarrantyPolicySettings | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.audit = audit or AuditRecorder(store)
        self.policy = policy or settings.warranty

    async def register_device(
        self,
        registration: DeviceRegistration,
        ip_address: str | None = None,
    ) -> RegistrationResult:
        """
        Register a device and activate its warranty.

        Args:
            registration: Device and owner details.
            ip_address: Caller's address for the audit trail.

        Returns:
            RegistrationResult; ``email_sent`` is False when the
            confirmation email could not be delivered.

        Raises:
            InvalidDeviceError: Photo count outside [2, 6].
            DuplicateDeviceError: An active device has this IMEI or fiscal number.
            IdentifierCollisionError: No unique policy number could be allocated.
            RegistrationFailedError: The records could not be written.
        """
        device = Device(
            imei=registration.imei,
            fiscal_number=registration.fiscal_number,
            model=registration.model,
            brand=registration.brand,
            purchase_date=registration.purchase_date,
            owner_cpf_cnpj=registration.owner_cpf_cnpj,
            owner_name=registration.owner_name,
            owner_email=registration.owner_email,
            owner_phone=registration.owner_phone,
            photos=registration.photos,
        )

        existing = await self.store.find_one(
            DEVICES,
            {
                "$or": [
                    {"imei": registration.imei},
                    {"fiscal_number": registration.fiscal_number},
                ],
                "is_active": True,
            },
        )
        if existing:
            await self._audit_registration_failure(
                DUPLICATE_DEVICE_MESSAGE, registration, ip_address
            )
            raise DuplicateDeviceError(DUPLICATE_DEVICE_MESSAGE)

        try:
            device.id = await self.store.insert_one(DEVICES, device.to_document())
        except DuplicateKeyError as e:
            await self._audit_registration_failure(
                DUPLICATE_DEVICE_MESSAGE, registration, ip_address
            )
            raise DuplicateDeviceError(DUPLICATE_DEVICE_MESSAGE) from e
        except Exception as e:
            await self._audit_registration_failure(str(e), registration, ip_address)
            raise RegistrationFailedError("Failed to register device") from e

        try:
            warranty = await self._activate_warranty(device)
        except IdentifierCollisionError as e:
            await self._rollback_device(device)
            await self._audit_registration_failure(e.message, registration, ip_address)
            raise
        except Exception as e:
            await self._rollback_device(device)
            await self._audit_registration_failure(str(e), registration, ip_address)
            raise RegistrationFailedError("Failed to register device") from e

        await self.audit.record(
            AuditAction.CREATE,
            AuditEntity.DEVICE,
            f"Device registered successfully: {device.imei}",
            entity_id=device.id,
            ip_address=ip_address,
            metadata={"device_id": device.id, "warranty_id": warranty.id},
        )
        logger.info(
            "device_registered",
            device_id=device.id,
            warranty_id=warranty.id,
            policy_number=warranty.policy_number,
        )

        email_sent = await self._send_registration_email(device, warranty)

        return RegistrationResult(
            success=True,
            device=DeviceSummary.from_device(device),
            warranty=WarrantySummary.from_warranty(warranty),
            message="Device registered successfully and warranty activated",
            email_sent=email_sent,
        )

    async def validate_warranty(
        self,
        query: WarrantyValidation,
        ip_address: str | None = None,
    ) -> ValidationResult:
        """
        Check whether a device has valid warranty coverage.

        The device is matched on model, owner tax ID and either IMEI or
        fiscal number (IMEI wins when both are given). Every outcome is
        audited exactly once.

        Raises:
            MissingIdentifierError: Neither IMEI nor fiscal number was given.
        """
        if not query.identifier:
            raise MissingIdentifierError("Either IMEI or fiscal number must be provided")

        device_filter = {
            "model": query.model,
            "owner_cpf_cnpj": query.owner_cpf_cnpj,
            "is_active": True,
        }
        if query.imei:
            device_filter["imei"] = query.imei
        else:
            device_filter["fiscal_number"] = query.fiscal_number  # type: ignore[assignment]

        device_doc = await self.store.find_one(DEVICES, device_filter)
        if device_doc is None:
            await self.audit.record(
                AuditAction.VALIDATE_WARRANTY,
                AuditEntity.DEVICE,
                f"Device not found for validation: {query.identifier}",
                ip_address=ip_address,
                metadata={
                    "imei": query.imei,
                    "fiscal_number": query.fiscal_number,
                    "model": query.model,
                    "owner_cpf_cnpj": query.owner_cpf_cnpj,
                },
            )
            return ValidationResult(
                is_valid=False,
                message="Device not found or does not match the provided information",
            )

        device = Device.from_document(device_doc)
        device_summary = DeviceSummary.from_device(device)

        warranty_doc = await self.store.find_one(
            WARRANTIES,
            {"device_id": device.id, "status": WarrantyStatus.ACTIVE.value, "is_active": True},
        )
        if warranty_doc is None:
            expired = await self._latest_expired_warranty(device.id)
            if expired is not None:
                await self.audit.record(
                    AuditAction.VALIDATE_WARRANTY,
                    AuditEntity.WARRANTY,
                    "Validation of an already expired warranty",
                    entity_id=expired.id,
                    ip_address=ip_address,
                )
                return ValidationResult(
                    is_valid=False,
                    message="Warranty has expired",
                    device=device_summary,
                    warranty=WarrantySummary.from_warranty(expired),
                )

            await self.audit.record(
                AuditAction.VALIDATE_WARRANTY,
                AuditEntity.WARRANTY,
                "No active warranty found for device",
                entity_id=device.id,
                ip_address=ip_address,
                metadata={"device_id": device.id},
            )
            return ValidationResult(
                is_valid=False,
                message="No active warranty found for this device",
                device=device_summary,
            )

        warranty = Warranty.from_document(warranty_doc)
        if warranty.is_past_end(datetime.now(UTC)):
            await expire_warranty(self.store, warranty)
            await self.audit.record(
                AuditAction.VALIDATE_WARRANTY,
                AuditEntity.WARRANTY,
                "Warranty expired during validation",
                entity_id=warranty.id,
                ip_address=ip_address,
            )
            return ValidationResult(
                is_valid=False,
                message="Warranty has expired",
                device=device_summary,
                warranty=WarrantySummary.from_warranty(warranty),
            )

        await self.audit.record(
            AuditAction.VALIDATE_WARRANTY,
            AuditEntity.WARRANTY,
            "Warranty validation successful",
            entity_id=warranty.id,
            ip_address=ip_address,
        )
        return ValidationResult(
            is_valid=True,
            message="Warranty is active and valid",
            device=device_summary,
            warranty=WarrantySummary.from_warranty(warranty),
        )

    async def _activate_warranty(self, device: Device) -> Warranty:
        start = datetime.now(UTC)
        warranty = Warranty(
            device_id=device.id or "",
            policy_number="",
            coverage_type=CoverageType(self.policy.coverage_type),
            start_date=start,
            end_date=add_years(start, self.policy.term_years),
            max_claims=self.policy.max_claims,
            insurance_provider=self.policy.insurance_provider,
        )

        def build() -> dict:
            warranty.policy_number = generate_policy_number(self.policy.policy_prefix)
            return warranty.to_document()

        warranty.id, _ = await insert_with_fresh_identifier(
            self.store,
            WARRANTIES,
            "policy_number",
            build,
            attempts=self.policy.insert_attempts,
        )
        return warranty

    async def _latest_expired_warranty(self, device_id: str | None) -> Warranty | None:
        docs = await self.store.find_many(
            WARRANTIES,
            {"device_id": device_id, "status": WarrantyStatus.EXPIRED.value, "is_active": True},
        )
        if not docs:
            return None
        return Warranty.from_document(max(docs, key=lambda d: d["end_date"]))

    async def _rollback_device(self, device: Device) -> None:
        """Soft-delete a device whose warranty could not be created."""
        try:
            await self.store.update_one(DEVICES, {"id": device.id}, {"is_active": False})
        except Exception as e:
            logger.error("device_rollback_failed", device_id=device.id, error=str(e))

    async def _send_registration_email(self, device: Device, warranty: Warranty) -> bool:
        email = DeviceRegistrationEmail(
            owner_name=device.owner_name,
            owner_email=device.owner_email,
            device_model=device.model,
            device_brand=device.brand,
            imei=device.imei,
            registration_date=datetime.now(UTC),
            policy_number=warranty.policy_number,
            coverage_end=warranty.end_date,
        )
        try:
            sent = await self.notifier.send(email.owner_email, email.subject, email.render())
        except Exception as e:
            logger.error("registration_email_failed", device_id=device.id, error=str(e))
            return False
        if not sent:
            logger.warning("registration_email_not_sent", device_id=device.id)
        return sent

    async def _audit_registration_failure(
        self,
        reason: str,
        registration: DeviceRegistration,
        ip_address: str | None,
    ) -> None:
        logger.warning("device_registration_failed", imei=registration.imei, reason=reason)
        await self.audit.record(
            AuditAction.CREATE,
            AuditEntity.DEVICE,
            f"Failed to register device: {reason}",
            ip_address=ip_address,
            metadata=registration.audit_metadata(),
        )
