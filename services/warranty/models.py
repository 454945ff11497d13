"""
Warranty Domain Records.

Devices, warranties, claims and audit entries as stored in the record
store, with conversion to and from store documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from enum import Enum
from typing import Any

from services.warranty.exceptions import InvalidDeviceError


MIN_PHOTOS = 2
MAX_PHOTOS = 6


class WarrantyStatus(str, Enum):
    """Warranty coverage status."""

    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class CoverageType(str, Enum):
    """Warranty coverage tier."""

    SCREEN_ONLY = "screen_only"
    FULL_DEVICE = "full_device"
    PREMIUM = "premium"


class ClaimStatus(str, Enum):
    """Claim processing status."""

    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_REPAIR = "in_repair"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DamageType(str, Enum):
    """Kinds of damage a claim may report."""

    CRACKED_SCREEN = "cracked_screen"
    BROKEN_SCREEN = "broken_screen"
    BLACK_SCREEN = "black_screen"
    TOUCH_NOT_WORKING = "touch_not_working"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Customer-facing display text."""
        return _DAMAGE_LABELS[self]


_DAMAGE_LABELS = {
    DamageType.CRACKED_SCREEN: "Tela Rachada",
    DamageType.BROKEN_SCREEN: "Tela Quebrada",
    DamageType.BLACK_SCREEN: "Tela Preta/Não Liga",
    DamageType.TOUCH_NOT_WORKING: "Touch Não Funciona",
    DamageType.OTHER: "Outros",
}


class AuditAction(str, Enum):
    """Audited action kinds."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    VALIDATE_WARRANTY = "validate_warranty"
    SUBMIT_CLAIM = "submit_claim"
    APPROVE_CLAIM = "approve_claim"
    REJECT_CLAIM = "reject_claim"


class AuditEntity(str, Enum):
    """Audited entity kinds."""

    DEVICE = "device"
    WARRANTY = "warranty"
    CLAIM = "claim"


def as_utc_datetime(value: date | datetime) -> datetime:
    """Normalize a date or datetime to an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return datetime.combine(value, time.min, tzinfo=UTC)


def add_years(value: datetime, years: int) -> datetime:
    """Shift a datetime by whole calendar years (Feb 29 falls back to Feb 28)."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


@dataclass
class Device:
    """A physical unit enrolled in the warranty program."""

    imei: str
    fiscal_number: str
    model: str
    brand: str
    purchase_date: datetime
    owner_cpf_cnpj: str
    owner_name: str
    owner_email: str
    owner_phone: str
    photos: list[str]
    is_active: bool = True
    id: str | None = None

    def __post_init__(self) -> None:
        if not MIN_PHOTOS <= len(self.photos) <= MAX_PHOTOS:
            raise InvalidDeviceError(
                f"Device must have between {MIN_PHOTOS} and {MAX_PHOTOS} photos"
            )
        self.purchase_date = as_utc_datetime(self.purchase_date)

    def to_document(self) -> dict[str, Any]:
        return {
            "imei": self.imei,
            "fiscal_number": self.fiscal_number,
            "model": self.model,
            "brand": self.brand,
            "purchase_date": self.purchase_date,
            "owner_cpf_cnpj": self.owner_cpf_cnpj,
            "owner_name": self.owner_name,
            "owner_email": self.owner_email,
            "owner_phone": self.owner_phone,
            "photos": list(self.photos),
            "is_active": self.is_active,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Device:
        return cls(
            id=doc["id"],
            imei=doc["imei"],
            fiscal_number=doc["fiscal_number"],
            model=doc["model"],
            brand=doc["brand"],
            purchase_date=doc["purchase_date"],
            owner_cpf_cnpj=doc["owner_cpf_cnpj"],
            owner_name=doc["owner_name"],
            owner_email=doc["owner_email"],
            owner_phone=doc["owner_phone"],
            photos=doc.get("photos", []),
            is_active=doc.get("is_active", True),
        )


@dataclass
class Warranty:
    """One coverage period for one device."""

    device_id: str
    policy_number: str
    coverage_type: CoverageType
    start_date: datetime
    end_date: datetime
    max_claims: int
    insurance_provider: str
    status: WarrantyStatus = WarrantyStatus.ACTIVE
    used_claims: int = 0
    notes: str | None = None
    is_active: bool = True
    id: str | None = None

    @property
    def remaining_claims(self) -> int:
        return self.max_claims - self.used_claims

    def is_past_end(self, now: datetime) -> bool:
        """True once the coverage window has closed."""
        return as_utc_datetime(self.end_date) < now

    def to_document(self) -> dict[str, Any]:
        return {
            "device_id": self.device_id,
            "policy_number": self.policy_number,
            "coverage_type": self.coverage_type.value,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "max_claims": self.max_claims,
            "used_claims": self.used_claims,
            "insurance_provider": self.insurance_provider,
            "status": self.status.value,
            "notes": self.notes,
            "is_active": self.is_active,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Warranty:
        return cls(
            id=doc["id"],
            device_id=doc["device_id"],
            policy_number=doc["policy_number"],
            coverage_type=CoverageType(doc["coverage_type"]),
            start_date=doc["start_date"],
            end_date=doc["end_date"],
            max_claims=doc["max_claims"],
            used_claims=doc.get("used_claims", 0),
            insurance_provider=doc.get("insurance_provider", ""),
            status=WarrantyStatus(doc["status"]),
            notes=doc.get("notes"),
            is_active=doc.get("is_active", True),
        )


@dataclass
class Claim:
    """One invocation of a warranty."""

    protocol_number: str
    device_id: str
    warranty_id: str
    damage_type: DamageType
    damage_description: str
    incident_date: datetime
    customer_name: str
    customer_cpf: str
    customer_phone: str
    customer_email: str
    status: ClaimStatus = ClaimStatus.SUBMITTED
    evidence_photos: list[str] = field(default_factory=list)
    documents: list[str] = field(default_factory=list)
    repair_shop: str | None = None
    estimated_cost: float | None = None
    actual_cost: float | None = None
    repair_date: datetime | None = None
    completion_date: datetime | None = None
    rejection_reason: str | None = None
    admin_notes: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "protocol_number": self.protocol_number,
            "device_id": self.device_id,
            "warranty_id": self.warranty_id,
            "status": self.status.value,
            "damage_type": self.damage_type.value,
            "damage_description": self.damage_description,
            "incident_date": as_utc_datetime(self.incident_date),
            "customer_name": self.customer_name,
            "customer_cpf": self.customer_cpf,
            "customer_phone": self.customer_phone,
            "customer_email": self.customer_email,
            "evidence_photos": list(self.evidence_photos),
            "documents": list(self.documents),
            "repair_shop": self.repair_shop,
            "estimated_cost": self.estimated_cost,
            "actual_cost": self.actual_cost,
            "repair_date": self.repair_date,
            "completion_date": self.completion_date,
            "rejection_reason": self.rejection_reason,
            "admin_notes": self.admin_notes,
            "is_active": self.is_active,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Claim:
        return cls(
            id=doc["id"],
            protocol_number=doc["protocol_number"],
            device_id=doc["device_id"],
            warranty_id=doc["warranty_id"],
            status=ClaimStatus(doc["status"]),
            damage_type=DamageType(doc["damage_type"]),
            damage_description=doc["damage_description"],
            incident_date=doc["incident_date"],
            customer_name=doc["customer_name"],
            customer_cpf=doc["customer_cpf"],
            customer_phone=doc["customer_phone"],
            customer_email=doc["customer_email"],
            evidence_photos=doc.get("evidence_photos", []),
            documents=doc.get("documents", []),
            repair_shop=doc.get("repair_shop"),
            estimated_cost=doc.get("estimated_cost"),
            actual_cost=doc.get("actual_cost"),
            repair_date=doc.get("repair_date"),
            completion_date=doc.get("completion_date"),
            rejection_reason=doc.get("rejection_reason"),
            admin_notes=doc.get("admin_notes"),
            is_active=doc.get("is_active", True),
            created_at=doc.get("created_at"),
        )


@dataclass(frozen=True)
class AuditLog:
    """Append-only record of an action taken against an entity."""

    action: AuditAction
    entity_type: AuditEntity
    description: str
    timestamp: datetime
    entity_id: str | None = None
    user_id: str | None = None
    ip_address: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "entity_type": self.entity_type.value,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "description": self.description,
            "metadata": dict(self.metadata),
            "timestamp": self.timestamp,
        }
