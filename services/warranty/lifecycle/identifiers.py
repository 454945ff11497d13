"""
Human-presentable identifiers for warranties and claims.

Both numbers embed the current millisecond epoch plus a short random
suffix. They are practically but not strictly unique, so inserts go
through ``insert_with_fresh_identifier`` which regenerates the number
when the store's unique index rejects it.
"""

from __future__ import annotations

import random
import string
import time
from collections.abc import Callable
from typing import Any

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from services.warranty.exceptions import IdentifierCollisionError
from services.warranty.store.base import DuplicateKeyError, RecordStore
from shared.logging import get_logger


logger = get_logger(__name__)

_POLICY_ALPHABET = string.ascii_uppercase + string.digits


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def generate_protocol_number(prefix: str = "SGR") -> str:
    """Prefix, 13-digit millisecond epoch and a zero-padded 3-digit suffix."""
    return f"{prefix}{_epoch_millis()}{random.randint(0, 999):03d}"


def generate_policy_number(prefix: str = "POL") -> str:
    suffix = "".join(random.choices(_POLICY_ALPHABET, k=9))
    return f"{prefix}-{_epoch_millis()}-{suffix}"


async def insert_with_fresh_identifier(
    store: RecordStore,
    collection: str,
    field: str,
    build: Callable[[], dict[str, Any]],
    attempts: int = 3,
) -> tuple[str, dict[str, Any]]:
    """
    Insert ``build()`` into ``collection``, rebuilding on a ``field`` collision.

    Raises:
        IdentifierCollisionError: every attempt collided.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(IdentifierCollisionError),
        stop=stop_after_attempt(attempts),
        reraise=True,
    ):
        with attempt:
            document = build()
            try:
                doc_id = await store.insert_one(collection, document)
            except DuplicateKeyError as e:
                if e.field not in (field, None):
                    raise
                logger.warning(
                    "identifier_collision",
                    collection=collection,
                    field=field,
                    value=document.get(field),
                    attempt=attempt.retry_state.attempt_number,
                )
                raise IdentifierCollisionError(
                    f"Could not allocate a unique {field.replace('_', ' ')}, please retry"
                ) from e
    return doc_id, document
