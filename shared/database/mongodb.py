"""
MongoDB Client
==============

Async MongoDB client using Motor for device, warranty, claim and
audit documents.

Version: 0.1.0
"""

import time
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from shared.config import settings
from shared.logging import get_logger

logger = get_logger(__name__)


# Unique fields per collection.
UNIQUE_INDEXES: dict[str, tuple[str, ...]] = {
    "devices": ("imei", "fiscal_number"),
    "warranties": ("policy_number",),
    "claims": ("protocol_number",),
}

# Collections whose unique fields only apply among active documents. A
# soft-deleted device frees its IMEI; protocol and policy numbers are never reused.
ACTIVE_ONLY_UNIQUE: frozenset[str] = frozenset({"devices"})


class MongoDBClient:
    """
    Async MongoDB client wrapper.

    Manages client lifecycle and provides database access.
    """

    _client: AsyncIOMotorClient | None = None  # type: ignore[type-arg]

    @classmethod
    def get_client(cls) -> AsyncIOMotorClient:  # type: ignore[type-arg]
        """Get or create the async client."""
        if cls._client is None:
            cls._client = AsyncIOMotorClient(
                settings.mongodb.uri,
                tz_aware=True,
                retryWrites=True,
                w="majority",
                maxPoolSize=50,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
            )
            logger.info(
                "mongodb_client_created",
                host=settings.mongodb.host,
                database=settings.mongodb.db,
            )
        return cls._client

    @classmethod
    def get_database(cls, name: str | None = None) -> AsyncIOMotorDatabase:  # type: ignore[type-arg]
        """
        Get a database instance.

        Args:
            name: Database name (default from settings)

        Returns:
            AsyncIOMotorDatabase instance
        """
        client = cls.get_client()
        db_name = name or settings.mongodb.db
        return client[db_name]

    @classmethod
    async def close(cls) -> None:
        """Close the client and release all connections."""
        if cls._client is not None:
            cls._client.close()
            cls._client = None
            logger.info("mongodb_client_closed")

    @classmethod
    async def health_check(cls) -> dict[str, Any]:
        """
        Check database health.

        Returns:
            dict with status and latency
        """
        try:
            start = time.perf_counter()
            client = cls.get_client()
            result = await client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000

            return {
                "status": "healthy" if result.get("ok") == 1 else "unhealthy",
                "latency_ms": round(latency_ms, 2),
            }
        except Exception as e:
            logger.error("mongodb_health_check_failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e),
            }

    @classmethod
    async def create_indexes(cls) -> None:
        """Create indexes for all collections."""
        db = cls.get_database()

        for collection, fields in UNIQUE_INDEXES.items():
            for field in fields:
                if collection in ACTIVE_ONLY_UNIQUE:
                    await db[collection].create_index(
                        field,
                        unique=True,
                        partialFilterExpression={"is_active": True},
                        name=f"{field}_unique_active",
                    )
                else:
                    await db[collection].create_index(
                        field, unique=True, name=f"{field}_unique"
                    )

        # Lookup paths used by the lifecycle services
        await db.devices.create_index([("model", 1), ("owner_cpf_cnpj", 1)])
        await db.warranties.create_index([("device_id", 1), ("status", 1)])
        await db.claims.create_index("device_id")
        await db.audit_logs.create_index([("entity_id", 1), ("timestamp", -1)])

        logger.info("mongodb_indexes_created")
