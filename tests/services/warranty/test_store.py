"""Tests for the in-memory record store."""

import pytest

from services.warranty.store import (
    CLAIMS,
    DEVICES,
    WARRANTIES,
    DuplicateKeyError,
    InMemoryRecordStore,
)


class TestInMemoryRecordStore:
    """Tests for InMemoryRecordStore."""

    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_timestamps(self, store: InMemoryRecordStore) -> None:
        """Inserted documents come back with an id and timestamps."""
        doc_id = await store.insert_one(DEVICES, {"imei": "1", "is_active": True})

        doc = await store.find_one(DEVICES, {"id": doc_id})

        assert doc is not None
        assert doc["id"] == doc_id
        assert doc["created_at"] is not None
        assert doc["updated_at"] is not None

    @pytest.mark.asyncio
    async def test_unique_field_rejected(self, store: InMemoryRecordStore) -> None:
        """A second active document with the same protocol number is rejected."""
        await store.insert_one(CLAIMS, {"protocol_number": "SGR1", "is_active": True})

        with pytest.raises(DuplicateKeyError) as exc_info:
            await store.insert_one(CLAIMS, {"protocol_number": "SGR1", "is_active": True})

        assert exc_info.value.collection == CLAIMS
        assert exc_info.value.field == "protocol_number"

    @pytest.mark.asyncio
    async def test_uniqueness_ignores_inactive_documents(self, store: InMemoryRecordStore) -> None:
        """A soft-deleted device does not block reuse of its IMEI."""
        await store.insert_one(DEVICES, {"imei": "1", "fiscal_number": "F1", "is_active": False})

        doc_id = await store.insert_one(
            DEVICES, {"imei": "1", "fiscal_number": "F1", "is_active": True}
        )

        assert doc_id

    @pytest.mark.asyncio
    async def test_or_filter(self, store: InMemoryRecordStore) -> None:
        """$or matches when any branch matches."""
        await store.insert_one(DEVICES, {"imei": "1", "fiscal_number": "F1", "is_active": True})

        found = await store.find_one(
            DEVICES,
            {"$or": [{"imei": "nope"}, {"fiscal_number": "F1"}], "is_active": True},
        )
        missing = await store.find_one(
            DEVICES,
            {"$or": [{"imei": "nope"}, {"fiscal_number": "nope"}]},
        )

        assert found is not None
        assert missing is None

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self, store: InMemoryRecordStore) -> None:
        """Mutating a returned document does not change the stored one."""
        doc_id = await store.insert_one(DEVICES, {"imei": "1", "photos": ["a", "b"]})

        doc = await store.find_one(DEVICES, {"id": doc_id})
        doc["photos"].append("c")

        again = await store.find_one(DEVICES, {"id": doc_id})
        assert again["photos"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_update_one(self, store: InMemoryRecordStore) -> None:
        """update_one sets fields and reports whether a document matched."""
        doc_id = await store.insert_one(WARRANTIES, {"status": "active"})

        assert await store.update_one(WARRANTIES, {"id": doc_id}, {"status": "expired"})
        assert not await store.update_one(WARRANTIES, {"id": "missing"}, {"status": "expired"})

        doc = await store.find_one(WARRANTIES, {"id": doc_id})
        assert doc["status"] == "expired"

    @pytest.mark.asyncio
    async def test_guarded_increment_stops_at_limit(self, store: InMemoryRecordStore) -> None:
        """Increment with a guard never pushes the counter past its limit."""
        doc_id = await store.insert_one(WARRANTIES, {"used_claims": 0, "max_claims": 2})

        results = [
            await store.increment(
                WARRANTIES, {"id": doc_id}, "used_claims", below_field="max_claims"
            )
            for _ in range(3)
        ]

        doc = await store.find_one(WARRANTIES, {"id": doc_id})
        assert results == [True, True, False]
        assert doc["used_claims"] == 2

    @pytest.mark.asyncio
    async def test_find_many_with_in_and_limit(self, store: InMemoryRecordStore) -> None:
        """find_many supports $in and limit, preserving insertion order."""
        for status in ["active", "expired", "cancelled", "expired"]:
            await store.insert_one(WARRANTIES, {"status": status})

        found = await store.find_many(WARRANTIES, {"status": {"$in": ["expired", "cancelled"]}})
        limited = await store.find_many(WARRANTIES, {}, limit=2)

        assert [d["status"] for d in found] == ["expired", "cancelled", "expired"]
        assert len(limited) == 2

    @pytest.mark.asyncio
    async def test_cancelled_claim_keeps_protocol_number(self, store: InMemoryRecordStore) -> None:
        """Protocol numbers stay unique even after a claim is soft-deleted."""
        await store.insert_one(CLAIMS, {"protocol_number": "SGR1", "is_active": False})

        with pytest.raises(DuplicateKeyError) as exc_info:
            await store.insert_one(CLAIMS, {"protocol_number": "SGR1", "is_active": True})

        assert exc_info.value.field == "protocol_number"

    @pytest.mark.asyncio
    async def test_inactive_warranty_keeps_policy_number(self, store: InMemoryRecordStore) -> None:
        await store.insert_one(WARRANTIES, {"policy_number": "POL-1-A", "is_active": False})

        with pytest.raises(DuplicateKeyError):
            await store.insert_one(WARRANTIES, {"policy_number": "POL-1-A", "is_active": True})
