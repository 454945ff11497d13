"""
Audit Recorder.

Append-only audit trail for lifecycle operations. Writes are best-effort:
a failed write is logged and never propagates to the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from services.warranty.models import AuditAction, AuditEntity, AuditLog
from services.warranty.store.base import AUDIT_LOGS, RecordStore
from shared.logging import get_logger


logger = get_logger(__name__)


class AuditRecorder:
    """Writes immutable audit entries to the record store."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def record(
        self,
        action: AuditAction,
        entity_type: AuditEntity,
        description: str,
        entity_id: str | None = None,
        user_id: str | None = None,
        ip_address: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str | None:
        """
        Append an audit entry.

        Returns:
            The new entry id, or None if the write failed.
        """
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            description=description,
            timestamp=datetime.now(UTC),
            entity_id=entity_id,
            user_id=user_id,
            ip_address=ip_address,
            metadata=metadata or {},
        )
        try:
            return await self._store.insert_one(AUDIT_LOGS, entry.to_document())
        except Exception as e:
            logger.error(
                "audit_write_failed",
                action=action.value,
                entity_type=entity_type.value,
                entity_id=entity_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
