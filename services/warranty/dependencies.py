"""FastAPI dependencies for the warranty service."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from services.warranty.lifecycle import ClaimsLifecycleService, WarrantyLifecycleService
from services.warranty.notifications import MockNotifier, NotificationPort, ResendNotifier
from services.warranty.store import InMemoryRecordStore, MongoRecordStore, RecordStore
from shared.config import EmailMode, StoreBackend, settings
from shared.database import MongoDBClient


@lru_cache
def get_record_store() -> RecordStore:
    """Record store for the configured backend."""
    if settings.store_backend == StoreBackend.MEMORY:
        return InMemoryRecordStore()
    return MongoRecordStore(MongoDBClient.get_database())


@lru_cache
def get_notifier() -> NotificationPort:
    """Email notifier; mock mode when no API key is configured."""
    if settings.email.mode == EmailMode.RESEND:
        return ResendNotifier()
    return MockNotifier()


def get_client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def get_warranty_service(
    store: RecordStore = Depends(get_record_store),
    notifier: NotificationPort = Depends(get_notifier),
) -> WarrantyLifecycleService:
    return WarrantyLifecycleService(store=store, notifier=notifier)


def get_claims_service(
    store: RecordStore = Depends(get_record_store),
) -> ClaimsLifecycleService:
    return ClaimsLifecycleService(store=store)
