"""
Butterfly API — Record Store Unit Tests
=========================================

What:  Tests for the generic query / filter / insert / upsert operations.
How:   Seeded JSONDatabase under tmp_path; the file on disk is inspected to
       confirm every mutation was persisted.

What we test:
    ✅ Empty match returns every record in insertion order
    ✅ Missing collection / no matches return []
    ✅ Inserted records are immediately queryable and written to disk
    ✅ Upsert merges onto the first match only, or inserts when none match
    ✅ Write failures propagate unchanged and roll back the in-memory change
"""

import json
from unittest.mock import AsyncMock, patch

import pytest


class TestQuery:

    @pytest.mark.asyncio
    async def test_empty_match_returns_all_in_insertion_order(self, record_store, seed_document):
        result = await record_store.query("butterflies", {})

        assert result == seed_document["butterflies"]

    @pytest.mark.asyncio
    async def test_match_fields_are_and_combined(self, record_store):
        result = await record_store.query("ratings", {"userId": "cdef1234", "rating": 3})

        assert result == [{"userId": "cdef1234", "butterflyId": "wxyz9876", "rating": 3}]

    @pytest.mark.asyncio
    async def test_no_match_returns_empty_list(self, record_store):
        assert await record_store.query("users", {"id": "nobody"}) == []

    @pytest.mark.asyncio
    async def test_missing_collection_returns_empty_list(self, record_store):
        assert await record_store.query("moths", {}) == []

    @pytest.mark.asyncio
    async def test_field_absent_from_record_does_not_match(self, record_store):
        assert await record_store.query("users", {"email": None}) == []

    @pytest.mark.asyncio
    async def test_results_are_snapshots(self, record_store, database):
        """Mutating a returned record must not change the stored document."""
        result = await record_store.query("users", {"id": "abcd1234"})
        result[0]["username"] = "changed"

        assert database.data["users"][0]["username"] == "test-user"


class TestFilter:

    @pytest.mark.asyncio
    async def test_plain_values_behave_like_query(self, record_store):
        by_filter = await record_store.filter("ratings", {"userId": "abcd1234"})
        by_query = await record_store.query("ratings", {"userId": "abcd1234"})

        assert by_filter == by_query
        assert len(by_filter) == 2

    @pytest.mark.asyncio
    async def test_callable_predicate(self, record_store):
        result = await record_store.filter("ratings", {"rating": lambda value: value >= 4})

        assert [r["rating"] for r in result] == [5, 4, 4]

    @pytest.mark.asyncio
    async def test_callable_not_called_for_missing_field(self, record_store):
        predicate = lambda value: True  # noqa: E731

        assert await record_store.filter("users", {"email": predicate}) == []


class TestInsert:

    @pytest.mark.asyncio
    async def test_inserted_record_is_queryable(self, record_store):
        record = {"id": "u-new", "username": "Buster"}

        await record_store.insert("users", record)

        assert await record_store.query("users", {"id": "u-new"}) == [record]

    @pytest.mark.asyncio
    async def test_insert_returns_updated_collection(self, record_store):
        result = await record_store.insert("users", {"id": "u-new", "username": "Buster"})

        assert len(result) == 5
        assert result[-1] == {"id": "u-new", "username": "Buster"}

    @pytest.mark.asyncio
    async def test_insert_persists_whole_document(self, record_store, database_path):
        await record_store.insert("users", {"id": "u-new", "username": "Buster"})

        on_disk = json.loads(database_path.read_text())
        assert on_disk["users"][-1] == {"id": "u-new", "username": "Buster"}
        assert len(on_disk["butterflies"]) == 3

    @pytest.mark.asyncio
    async def test_insert_creates_missing_collection(self, record_store):
        await record_store.insert("moths", {"id": "m1"})

        assert await record_store.query("moths", {}) == [{"id": "m1"}]

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, record_store, database):
        with patch.object(database, "write", AsyncMock(side_effect=OSError("disk full"))):
            with pytest.raises(OSError, match="disk full"):
                await record_store.insert("users", {"id": "u-new", "username": "Buster"})

        assert await record_store.query("users", {"id": "u-new"}) == []
        assert len(database.data["users"]) == 4

    @pytest.mark.asyncio
    async def test_failed_insert_keeps_equal_earlier_record(self, record_store, database):
        await record_store.insert("users", {"id": "twin", "username": "same"})

        with patch.object(database, "write", AsyncMock(side_effect=OSError("disk full"))):
            with pytest.raises(OSError):
                await record_store.insert("users", {"id": "twin", "username": "same"})

        assert await record_store.query("users", {"id": "twin"}) == [{"id": "twin", "username": "same"}]


class TestUpsert:

    @pytest.mark.asyncio
    async def test_update_merges_patch_and_keeps_other_fields(self, record_store, database):
        database.data["ratings"][0]["comment"] = "lovely"

        result = await record_store.upsert(
            "ratings",
            {"userId": "abcd1234", "butterflyId": "wxyz9876"},
            {"rating": 2},
        )

        assert result == {
            "userId": "abcd1234",
            "butterflyId": "wxyz9876",
            "rating": 2,
            "comment": "lovely",
        }
        assert len(database.data["ratings"]) == 4

    @pytest.mark.asyncio
    async def test_update_touches_first_match_only(self, record_store, database):
        database.data["users"].append({"id": "dup", "username": "first"})
        database.data["users"].append({"id": "dup", "username": "second"})

        await record_store.upsert("users", {"id": "dup"}, {"username": "patched"})

        dups = await record_store.query("users", {"id": "dup"})
        assert [u["username"] for u in dups] == ["patched", "second"]

    @pytest.mark.asyncio
    async def test_no_match_inserts_patch(self, record_store):
        patch_fields = {"userId": "abcd12345", "butterflyId": "DCenP4kQNQ", "rating": 1}

        result = await record_store.upsert(
            "ratings",
            {"userId": "abcd12345", "butterflyId": "DCenP4kQNQ"},
            patch_fields,
        )

        assert result == patch_fields
        assert (await record_store.query("ratings", {"userId": "abcd12345"})) == [patch_fields]

    @pytest.mark.asyncio
    async def test_update_is_persisted(self, record_store, database_path):
        await record_store.upsert("users", {"id": "abcd1234"}, {"username": "renamed"})

        on_disk = json.loads(database_path.read_text())
        assert on_disk["users"][0] == {"id": "abcd1234", "username": "renamed"}

    @pytest.mark.asyncio
    async def test_failed_update_restores_previous_fields(self, record_store, database, database_path):
        before = database_path.read_text()

        with patch.object(database, "write", AsyncMock(side_effect=OSError("disk full"))):
            with pytest.raises(OSError, match="disk full"):
                await record_store.upsert(
                    "ratings",
                    {"userId": "abcd1234", "butterflyId": "wxyz9876"},
                    {"rating": 1, "comment": "meh"},
                )

        assert await record_store.query("ratings", {"userId": "abcd1234", "butterflyId": "wxyz9876"}) == [
            {"userId": "abcd1234", "butterflyId": "wxyz9876", "rating": 5}
        ]
        assert database_path.read_text() == before

    @pytest.mark.asyncio
    async def test_failed_insert_path_leaves_no_record(self, record_store, database):
        with patch.object(database, "write", AsyncMock(side_effect=OSError("disk full"))):
            with pytest.raises(OSError):
                await record_store.upsert(
                    "ratings",
                    {"userId": "abcd12345", "butterflyId": "DCenP4kQNQ"},
                    {"userId": "abcd12345", "butterflyId": "DCenP4kQNQ", "rating": 2},
                )

        assert await record_store.query("ratings", {"userId": "abcd12345"}) == []
