"""Record store backends."""

from services.warranty.store.base import (
    AUDIT_LOGS,
    CLAIMS,
    DEVICES,
    WARRANTIES,
    DuplicateKeyError,
    RecordStore,
)
from services.warranty.store.memory import InMemoryRecordStore
from services.warranty.store.mongo import MongoRecordStore

__all__ = [
    "AUDIT_LOGS",
    "CLAIMS",
    "DEVICES",
    "WARRANTIES",
    "DuplicateKeyError",
    "RecordStore",
    "InMemoryRecordStore",
    "MongoRecordStore",
]
