"""
Database Module
===============

Async MongoDB client (Motor) for the StarShield document store.

Usage:
    from shared.database import MongoDBClient

    db = MongoDBClient.get_database()
    device = await db.devices.find_one({"imei": imei})
"""

from shared.database.mongodb import (
    ACTIVE_ONLY_UNIQUE,
    UNIQUE_INDEXES,
    MongoDBClient,
)


__all__ = [
    "ACTIVE_ONLY_UNIQUE",
    "MongoDBClient",
    "UNIQUE_INDEXES",
]
