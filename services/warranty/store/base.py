"""
Record Store Interface.

Document storage for devices, warranties, claims and audit entries.
Documents are plain dicts; every returned document carries its
identifier under ``"id"`` as a string, and filters may match on ``"id"``.
Filters support field equality, ``{"$in": [...]}`` and a top-level
``"$or"`` list of sub-filters.
"""

from __future__ import annotations

from typing import Any, Protocol

from shared.database import ACTIVE_ONLY_UNIQUE, UNIQUE_INDEXES


DEVICES = "devices"
WARRANTIES = "warranties"
CLAIMS = "claims"
AUDIT_LOGS = "audit_logs"

__all__ = [
    "ACTIVE_ONLY_UNIQUE",
    "AUDIT_LOGS",
    "CLAIMS",
    "DEVICES",
    "DuplicateKeyError",
    "RecordStore",
    "UNIQUE_INDEXES",
    "WARRANTIES",
]


class DuplicateKeyError(Exception):
    """An insert violated a unique field."""

    def __init__(self, collection: str, field: str | None) -> None:
        super().__init__(f"Duplicate value for {collection}.{field or '?'}")
        self.collection = collection
        self.field = field


class RecordStore(Protocol):
    """Protocol for the persistent record store."""

    async def insert_one(self, collection: str, document: dict[str, Any]) -> str:
        """Insert a document and return its id. Raises DuplicateKeyError."""
        ...

    async def find_one(
        self,
        collection: str,
        filter: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Return the first matching document, or None."""
        ...

    async def find_many(
        self,
        collection: str,
        filter: dict[str, Any],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return matching documents in insertion order."""
        ...

    async def update_one(
        self,
        collection: str,
        filter: dict[str, Any],
        values: dict[str, Any],
    ) -> bool:
        """Set fields on the first matching document. True if one matched."""
        ...

    async def increment(
        self,
        collection: str,
        filter: dict[str, Any],
        field: str,
        amount: int = 1,
        below_field: str | None = None,
    ) -> bool:
        """
        Atomically add ``amount`` to ``field`` on the first matching document.

        With ``below_field`` the increment only applies while
        ``document[field] < document[below_field]``. Returns True when a
        document was modified.
        """
        ...
