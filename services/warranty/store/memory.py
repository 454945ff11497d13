"""
In-memory Record Store.

Development and test backend with the same uniqueness and guarded
increment semantics as the MongoDB store.
"""

from __future__ import annotations

import asyncio
import copy
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from services.warranty.store.base import ACTIVE_ONLY_UNIQUE, UNIQUE_INDEXES, DuplicateKeyError


def _matches(doc: dict[str, Any], filter: dict[str, Any]) -> bool:
    for key, expected in filter.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in expected):
                return False
        elif isinstance(expected, dict) and "$in" in expected:
            if doc.get(key) not in expected["$in"]:
                return False
        elif doc.get(key) != expected:
            return False
    return True


class InMemoryRecordStore:
    """Record store backed by per-collection dicts."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def _check_unique(self, collection: str, document: dict[str, Any]) -> None:
        active_only = collection in ACTIVE_ONLY_UNIQUE
        for field in UNIQUE_INDEXES.get(collection, ()):
            if field not in document or (active_only and not document.get("is_active", True)):
                continue
            for existing in self._collection(collection).values():
                if active_only and not existing.get("is_active", True):
                    continue
                if existing.get(field) == document[field]:
                    raise DuplicateKeyError(collection, field)

    async def insert_one(self, collection: str, document: dict[str, Any]) -> str:
        async with self._lock:
            self._check_unique(collection, document)
            doc_id = uuid4().hex
            now = datetime.now(UTC)
            stored = copy.deepcopy(document)
            stored.setdefault("created_at", now)
            stored.setdefault("updated_at", now)
            stored["id"] = doc_id
            self._collection(collection)[doc_id] = stored
            return doc_id

    async def find_one(
        self,
        collection: str,
        filter: dict[str, Any],
    ) -> dict[str, Any] | None:
        for doc in self._collection(collection).values():
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def find_many(
        self,
        collection: str,
        filter: dict[str, Any],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        found = [
            copy.deepcopy(doc)
            for doc in self._collection(collection).values()
            if _matches(doc, filter)
        ]
        return found[:limit] if limit is not None else found

    async def update_one(
        self,
        collection: str,
        filter: dict[str, Any],
        values: dict[str, Any],
    ) -> bool:
        async with self._lock:
            for doc in self._collection(collection).values():
                if _matches(doc, filter):
                    doc.update(copy.deepcopy(values))
                    doc["updated_at"] = datetime.now(UTC)
                    return True
            return False

    async def increment(
        self,
        collection: str,
        filter: dict[str, Any],
        field: str,
        amount: int = 1,
        below_field: str | None = None,
    ) -> bool:
        async with self._lock:
            for doc in self._collection(collection).values():
                if not _matches(doc, filter):
                    continue
                if below_field is not None and not doc.get(field, 0) < doc[below_field]:
                    continue
                doc[field] = doc.get(field, 0) + amount
                doc["updated_at"] = datetime.now(UTC)
                return True
            return False

    def clear_all(self) -> None:
        """Drop every collection."""
        self._collections.clear()
