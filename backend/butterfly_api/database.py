"""
Butterfly API — JSON Document Database
========================================

What:  The durable store: one JSON document holding every collection.
How:   The whole document is read into memory at startup and rewritten in
       full after every mutation. Writes go to a sibling temp file that then
       atomically replaces the target.
Who:   Wrapped by RecordStore (services/record_store.py); attached to the
       FastAPI app as ``app.state.database`` by the factory in main.py.
When:  ``read()`` once during lifespan startup; ``write()`` on every insert
       or upsert.

Document layout on disk:
    {
        "butterflies": [{"id": ..., "commonName": ..., ...}, ...],
        "users":       [{"id": ..., "username": ...}, ...],
        "ratings":     [{"userId": ..., "butterflyId": ..., "rating": ...}, ...]
    }

Errors from the file system or the JSON decoder are not caught here; they
propagate to whoever triggered the read or write.
"""

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os
from fastapi import Request

logger = logging.getLogger(__name__)

# ── Collection Names ──────────────────────────────────────────────────────
BUTTERFLIES = "butterflies"
USERS = "users"
RATINGS = "ratings"

DEFAULT_COLLECTIONS = (BUTTERFLIES, USERS, RATINGS)

Document = Dict[str, List[Dict[str, Any]]]


def empty_document() -> Document:
    """A document with every known collection present and empty."""
    return {name: [] for name in DEFAULT_COLLECTIONS}


class JSONDatabase:
    """
    In-memory JSON document persisted to a single file.

    Attributes:
        path:    Location of the JSON file
        data:    The live document (collection name → list of records)
        loaded:  True once ``read()`` or ``set_state()`` has populated ``data``

    Whole-document writes are serialized by an asyncio.Lock so two in-flight
    persists never interleave on disk. Each write dumps the document as it is
    when the lock is acquired, so the last write carries every mutation that
    completed before it.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.data: Document = empty_document()
        self.loaded = False
        self._write_lock = asyncio.Lock()

    async def read(self) -> Document:
        """
        Load the whole document from disk into memory.

        A missing file yields an empty document (it is created on the first
        write). Collections missing from the file are added empty; unknown
        collections are kept as they are.

        Raises:
            json.JSONDecodeError: The file exists but is not valid JSON
            ValueError: The file holds JSON that is not an object
            OSError: The file exists but cannot be read
        """
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.info("Database file %s not found, starting with an empty document", self.path)
            self.data = empty_document()
            self.loaded = True
            return self.data

        document = json.loads(raw) if raw.strip() else {}
        if not isinstance(document, dict):
            raise ValueError(f"Database file {self.path} must contain a JSON object")

        for name in DEFAULT_COLLECTIONS:
            document.setdefault(name, [])

        self.data = document
        self.loaded = True
        logger.info(
            "Loaded database %s (%s)",
            self.path,
            ", ".join(f"{name}={len(records)}" for name, records in self.data.items()),
        )
        return self.data

    async def write(self) -> None:
        """
        Persist the whole in-memory document to disk.

        How:  Serialize → write ``<name>.tmp`` → atomic rename over the target.
              The parent directory is created when missing. A failed write
              removes the temp file and re-raises.
        """
        async with self._write_lock:
            payload = json.dumps(self.data, indent=2, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")

            try:
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(payload)
                await aiofiles.os.replace(tmp_path, self.path)
            except OSError:
                tmp_path.unlink(missing_ok=True)
                raise

            logger.debug("Persisted database %s (%d bytes)", self.path, len(payload))

    async def set_state(self, document: Document) -> None:
        """Replace the whole document (deep-copied) and persist it."""
        state = copy.deepcopy(document)
        for name in DEFAULT_COLLECTIONS:
            state.setdefault(name, [])
        self.data = state
        self.loaded = True
        await self.write()

    def collection(self, name: str) -> Optional[List[Dict[str, Any]]]:
        """The live list for ``name``, or None when the collection does not exist."""
        return self.data.get(name)

    def ensure_collection(self, name: str) -> List[Dict[str, Any]]:
        """The live list for ``name``, created empty when missing."""
        return self.data.setdefault(name, [])

    def counts(self) -> Dict[str, int]:
        """Number of records per collection (used by the health check)."""
        return {name: len(records) for name, records in self.data.items()}


# ── FastAPI Dependency ────────────────────────────────────────────────────
def get_database(request: Request) -> JSONDatabase:
    """
    FastAPI dependency returning the database attached to the running app.

    Example usage in a route:
        @router.get("/users/{user_id}")
        async def get_user(user_id: str, db: JSONDatabase = Depends(get_database)):
            ...
    """
    return request.app.state.database
