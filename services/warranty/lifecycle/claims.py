"""
Claims Lifecycle Service.

Files claims against a device's active warranty and moves claims
through their statuses.
"""

from __future__ import annotations

from datetime import UTC, datetime

from services.warranty.audit import AuditRecorder
from services.warranty.exceptions import (
    ClaimNotFoundError,
    ClaimQuotaExceededError,
    DeviceNotFoundError,
    NoActiveWarrantyError,
    WarrantyExpiredError,
)
from services.warranty.lifecycle.identifiers import (
    generate_protocol_number,
    insert_with_fresh_identifier,
)
from services.warranty.lifecycle.results import (
    ClaimDetails,
    ClaimSubmission,
    DeviceSummary,
    WarrantySummary,
)
from services.warranty.lifecycle.warranty import expire_warranty
from services.warranty.models import (
    AuditAction,
    AuditEntity,
    Claim,
    ClaimStatus,
    Device,
    Warranty,
    WarrantyStatus,
)
from services.warranty.store.base import CLAIMS, DEVICES, WARRANTIES, RecordStore
from shared.config import settings
from shared.config.settings import WarrantyPolicySettings
from shared.logging import get_logger


logger = get_logger(__name__)

QUOTA_EXCEEDED_MESSAGE = "Maximum number of claims reached for this warranty"

_STATUS_ACTIONS = {
    ClaimStatus.APPROVED: AuditAction.APPROVE_CLAIM,
    ClaimStatus.REJECTED: AuditAction.REJECT_CLAIM,
}


class ClaimsLifecycleService:
    """Claim submission, lookup and status management."""

    def __init__(
        self,
        store: RecordStore,
        audit: AuditRecorder | None = None,
        policy: WarrantyPolicySettings | None = None,
    ) -> None:
        self.store = store
        self.audit = audit or AuditRecorder(store)
        self.policy = policy or settings.warranty

    async def create_claim(
        self,
        submission: ClaimSubmission,
        ip_address: str | None = None,
    ) -> ClaimDetails:
        """
        File a claim against the device's active warranty.

        Checks run in order and the first failure wins. Only an expired
        warranty leaves a write behind (its EXPIRED status).

        Raises:
            DeviceNotFoundError: No active device with this id.
            NoActiveWarrantyError: The device has no ACTIVE warranty.
            WarrantyExpiredError: The warranty's end date has passed.
            ClaimQuotaExceededError: Every claim in the quota is used.
            IdentifierCollisionError: No unique protocol number could be allocated.
        """
        device_doc = await self.store.find_one(
            DEVICES, {"id": submission.device_id, "is_active": True}
        )
        if device_doc is None:
            await self._audit_rejection("Device not found", submission, ip_address)
            raise DeviceNotFoundError("Device not found")
        device = Device.from_document(device_doc)

        warranty_doc = await self.store.find_one(
            WARRANTIES,
            {"device_id": device.id, "status": WarrantyStatus.ACTIVE.value, "is_active": True},
        )
        if warranty_doc is None:
            message = "No active warranty found for this device"
            await self._audit_rejection(message, submission, ip_address)
            raise NoActiveWarrantyError(message)
        warranty = Warranty.from_document(warranty_doc)

        if warranty.is_past_end(datetime.now(UTC)):
            await expire_warranty(self.store, warranty)
            await self._audit_rejection("Warranty has expired", submission, ip_address)
            raise WarrantyExpiredError("Warranty has expired")

        if warranty.used_claims >= warranty.max_claims:
            await self._audit_rejection(QUOTA_EXCEEDED_MESSAGE, submission, ip_address)
            raise ClaimQuotaExceededError(QUOTA_EXCEEDED_MESSAGE)

        claim = Claim(
            protocol_number="",
            device_id=device.id or "",
            warranty_id=warranty.id or "",
            damage_type=submission.damage_type,
            damage_description=submission.damage_description,
            incident_date=submission.incident_date,  # type: ignore[arg-type]
            customer_name=submission.customer_name,
            customer_cpf=submission.customer_cpf,
            customer_phone=submission.customer_phone,
            customer_email=submission.customer_email,
            evidence_photos=submission.evidence_photos,
            documents=submission.documents,
            created_at=datetime.now(UTC),
        )

        def build() -> dict:
            claim.protocol_number = generate_protocol_number(self.policy.protocol_prefix)
            document = claim.to_document()
            document["created_at"] = claim.created_at
            return document

        claim.id, document = await insert_with_fresh_identifier(
            self.store,
            CLAIMS,
            "protocol_number",
            build,
            attempts=self.policy.insert_attempts,
        )
        claim.incident_date = document["incident_date"]

        # Guarded so concurrent submissions cannot push used_claims past max_claims.
        reserved = await self.store.increment(
            WARRANTIES,
            {"id": warranty.id},
            "used_claims",
            below_field="max_claims",
        )
        if not reserved:
            await self.store.update_one(
                CLAIMS,
                {"id": claim.id},
                {"is_active": False, "status": ClaimStatus.CANCELLED.value},
            )
            logger.warning(
                "claim_quota_race_lost",
                claim_id=claim.id,
                warranty_id=warranty.id,
            )
            await self._audit_rejection(QUOTA_EXCEEDED_MESSAGE, submission, ip_address)
            raise ClaimQuotaExceededError(QUOTA_EXCEEDED_MESSAGE)
        warranty.used_claims += 1

        await self.audit.record(
            AuditAction.SUBMIT_CLAIM,
            AuditEntity.CLAIM,
            f"Claim submitted with protocol: {claim.protocol_number}",
            entity_id=claim.id,
            ip_address=ip_address,
            metadata={"device_id": device.id, "protocol_number": claim.protocol_number},
        )
        logger.info(
            "claim_submitted",
            claim_id=claim.id,
            protocol_number=claim.protocol_number,
            remaining_claims=warranty.remaining_claims,
        )

        return self._details(claim, device, warranty)

    async def get_claim_by_protocol(self, protocol_number: str) -> ClaimDetails | None:
        """
        Look up an active claim by protocol number.

        Returns:
            ClaimDetails with device and warranty expanded, or None.
        """
        claim_doc = await self.store.find_one(
            CLAIMS, {"protocol_number": protocol_number, "is_active": True}
        )
        if claim_doc is None:
            return None
        claim = Claim.from_document(claim_doc)

        device_doc = await self.store.find_one(DEVICES, {"id": claim.device_id})
        warranty_doc = await self.store.find_one(WARRANTIES, {"id": claim.warranty_id})

        return self._details(
            claim,
            Device.from_document(device_doc) if device_doc else None,
            Warranty.from_document(warranty_doc) if warranty_doc else None,
        )

    async def update_claim_status(
        self,
        claim_id: str,
        status: ClaimStatus,
        admin_notes: str | None = None,
        user_id: str | None = None,
        ip_address: str | None = None,
    ) -> None:
        """
        Set a claim's status.

        Any status may follow any other. Moving to COMPLETED stamps the
        completion date; ``admin_notes``, when given, replaces the notes.

        Raises:
            ClaimNotFoundError: No claim with this id.
        """
        claim_doc = await self.store.find_one(CLAIMS, {"id": claim_id})
        if claim_doc is None:
            raise ClaimNotFoundError("Claim not found")
        old_status = ClaimStatus(claim_doc["status"])

        values: dict = {"status": status.value}
        if admin_notes:
            values["admin_notes"] = admin_notes
        if status == ClaimStatus.COMPLETED:
            values["completion_date"] = datetime.now(UTC)

        await self.store.update_one(CLAIMS, {"id": claim_id}, values)

        await self.audit.record(
            _STATUS_ACTIONS.get(status, AuditAction.UPDATE),
            AuditEntity.CLAIM,
            f"Claim status updated from {old_status.value} to {status.value}",
            entity_id=claim_id,
            user_id=user_id,
            ip_address=ip_address,
            metadata={
                "old_status": old_status.value,
                "new_status": status.value,
                "admin_notes": admin_notes,
            },
        )
        logger.info(
            "claim_status_changed",
            claim_id=claim_id,
            old_status=old_status.value,
            new_status=status.value,
        )

    async def _audit_rejection(
        self,
        reason: str,
        submission: ClaimSubmission,
        ip_address: str | None,
    ) -> None:
        await self.audit.record(
            AuditAction.SUBMIT_CLAIM,
            AuditEntity.CLAIM,
            f"Claim rejected: {reason}",
            ip_address=ip_address,
            metadata={
                "device_id": submission.device_id,
                "damage_type": submission.damage_type.value,
            },
        )

    @staticmethod
    def _details(
        claim: Claim,
        device: Device | None,
        warranty: Warranty | None,
    ) -> ClaimDetails:
        return ClaimDetails(
            id=claim.id or "",
            protocol_number=claim.protocol_number,
            status=claim.status,
            damage_type=claim.damage_type,
            damage_description=claim.damage_description,
            incident_date=claim.incident_date,
            customer_name=claim.customer_name,
            customer_cpf=claim.customer_cpf,
            customer_phone=claim.customer_phone,
            customer_email=claim.customer_email,
            evidence_photos=list(claim.evidence_photos),
            documents=list(claim.documents),
            created_at=claim.created_at,
            completion_date=claim.completion_date,
            device=DeviceSummary.from_device(device) if device else None,
            warranty=WarrantySummary.from_warranty(warranty) if warranty else None,
        )
