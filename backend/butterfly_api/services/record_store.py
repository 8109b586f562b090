"""
Butterfly API — Record Store (Flat-Store Accessor)
===================================================

What:  Generic record access over one named collection of the JSON document.
How:   Linear scans for reads; append or in-place merge followed by a
       whole-document write for mutations.
Who:   Used by ButterflyService; knows nothing about butterflies or ratings.

Operations:
    query(collection, match_fields)        exact-match lookup
    filter(collection, predicate_fields)   predicate lookup (callables allowed)
    insert(collection, record)             append + persist
    upsert(collection, match_fields, patch) merge into first match, else insert

Reads return copies of the stored records. When a write fails the in-memory
change is rolled back and the error propagates to the caller unchanged.
"""

import logging
from typing import Any, Dict, List, Mapping

from butterfly_api.database import JSONDatabase

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

_MISSING = object()


def _discard(records: List[Record], stored: Record) -> None:
    """Remove ``stored`` itself (not an equal record) from ``records``."""
    for index, record in enumerate(records):
        if record is stored:
            del records[index]
            return


def _equals(record: Mapping[str, Any], match_fields: Mapping[str, Any]) -> bool:
    """True when every field in ``match_fields`` equals the record's value."""
    return all(
        record.get(field, _MISSING) == value
        for field, value in match_fields.items()
    )


def _satisfies(record: Mapping[str, Any], predicate_fields: Mapping[str, Any]) -> bool:
    """True when every predicate holds; plain values are compared for equality."""
    for field, expected in predicate_fields.items():
        actual = record.get(field, _MISSING)
        if callable(expected):
            if actual is _MISSING or not expected(actual):
                return False
        elif actual != expected:
            return False
    return True


class RecordStore:
    """
    Query/insert/upsert layer over a JSONDatabase.

    Every operation is a coroutine: mutations suspend while the database
    persists, and keeping reads async gives callers one calling convention.
    """

    def __init__(self, database: JSONDatabase):
        self.database = database

    async def query(self, collection: str, match_fields: Mapping[str, Any]) -> List[Record]:
        """
        Records whose fields equal every entry of ``match_fields``.

        An empty mapping matches every record. A missing collection or no
        matches yields an empty list.
        """
        records = self.database.collection(collection) or []
        return [dict(record) for record in records if _equals(record, match_fields)]

    async def filter(
        self,
        collection: str,
        predicate_fields: Mapping[str, Any],
    ) -> List[Record]:
        """
        Records matching ``predicate_fields``.

        A value may be a callable taking the record's field value; a truthy
        result counts as a match. Any other value is compared for equality,
        which makes this identical to ``query`` for plain field sets.
        """
        records = self.database.collection(collection) or []
        return [dict(record) for record in records if _satisfies(record, predicate_fields)]

    async def insert(self, collection: str, record: Mapping[str, Any]) -> List[Record]:
        """Append ``record``, persist the document, return the updated collection."""
        records = self.database.ensure_collection(collection)
        stored = dict(record)
        records.append(stored)
        try:
            await self.database.write()
        except Exception:
            _discard(records, stored)
            raise
        logger.debug("Inserted record into %s (%d total)", collection, len(records))
        return [dict(r) for r in records]

    async def upsert(
        self,
        collection: str,
        match_fields: Mapping[str, Any],
        patch: Mapping[str, Any],
    ) -> Record:
        """
        Merge ``patch`` onto the first record matching ``match_fields``.

        Fields in ``patch`` overwrite same-named fields; other fields are left
        alone. When nothing matches, ``patch`` is inserted as a new record.

        Returns:
            The record as written (a copy).
        """
        matches = await self.query(collection, match_fields)
        if not matches:
            await self.insert(collection, patch)
            return dict(patch)

        target = self._first_live_match(collection, match_fields)
        previous = dict(target)
        target.update(patch)
        try:
            await self.database.write()
        except Exception:
            target.clear()
            target.update(previous)
            raise
        logger.debug("Updated record in %s matching %s", collection, dict(match_fields))
        return dict(target)

    def _first_live_match(self, collection: str, match_fields: Mapping[str, Any]) -> Record:
        """The stored (not copied) first record matching ``match_fields``."""
        records = self.database.collection(collection) or []
        return next(record for record in records if _equals(record, match_fields))
