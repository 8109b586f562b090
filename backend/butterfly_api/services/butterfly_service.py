"""
Butterfly API — Butterfly Service (Domain Logic)
==================================================

What:  Maps butterflies, users and ratings onto the RecordStore, enforces the
       rating's referential integrity and sorts rating listings.
Who:   Called by route handlers; calls RecordStore.

Rating write flow (upsert_rating):
    ┌────────────────┐    ┌────────────────┐    ┌──────────────────────────┐
    │ butterfly      │───▶│ user           │───▶│ upsert ratings keyed on  │
    │ {id} exists?   │    │ {id} exists?   │    │ {userId, butterflyId}    │
    └────────────────┘    └────────────────┘    └──────────────────────────┘
           │ no                   │ no
           ▼                      ▼
    InvalidReferenceError   InvalidReferenceError

    The butterfly is always checked first, so when both references are bad
    the butterfly error is the one reported. Both checks finish before any
    write is attempted.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request

from butterfly_api.database import BUTTERFLIES, RATINGS, USERS
from butterfly_api.exceptions import InvalidReferenceError
from butterfly_api.services.record_store import Record, RecordStore

logger = logging.getLogger(__name__)

ASCENDING = "asc"
DESCENDING = "desc"


class ButterflyService:
    """
    Domain operations over the three collections.

    Holds a rating-write lock so the check-check-upsert sequence of
    ``upsert_rating`` runs for one rating at a time.
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._rating_lock = asyncio.Lock()

    # ── Butterflies ───────────────────────────────────────────────────────

    async def insert_butterfly(self, new_butterfly: Dict[str, Any]) -> Dict[str, Any]:
        """Append a butterfly (``id`` already assigned) and return it unchanged."""
        await self.store.insert(BUTTERFLIES, new_butterfly)
        return new_butterfly

    async def get_butterflies(self, match_fields: Mapping[str, Any]) -> List[Record]:
        return await self.store.query(BUTTERFLIES, match_fields)

    # ── Users ─────────────────────────────────────────────────────────────

    async def insert_user(self, new_user: Dict[str, Any]) -> Dict[str, Any]:
        """Append a user (``id`` already assigned) and return it unchanged."""
        await self.store.insert(USERS, new_user)
        return new_user

    async def get_users(self, match_fields: Mapping[str, Any]) -> List[Record]:
        return await self.store.query(USERS, match_fields)

    # ── Ratings ───────────────────────────────────────────────────────────

    async def get_ratings(
        self,
        match_fields: Mapping[str, Any],
        order: Optional[str] = DESCENDING,
    ) -> List[Record]:
        """
        Ratings matching ``match_fields``, sorted by their ``rating`` value.

        Ascending only when ``order`` is exactly ``"asc"``; anything else
        (None, ``"desc"``, a typo) sorts descending. Ties keep insertion order.
        Never raises for no matches: returns an empty list.
        """
        records = await self.store.filter(RATINGS, match_fields)
        if order == ASCENDING:
            return sorted(records, key=lambda r: r["rating"])
        return sorted(records, key=lambda r: r["rating"], reverse=True)

    async def upsert_rating(self, new_rating: Dict[str, Any]) -> Record:
        """
        Create or replace the rating for (userId, butterflyId).

        Args:
            new_rating: Validated payload with userId, butterflyId and rating.
                        Used as the patch, so every field it holds is written.

        Returns:
            The rating record as stored.

        Raises:
            InvalidReferenceError: The butterfly or the user does not exist
                                   (butterfly checked first).
        """
        async with self._rating_lock:
            butterfly_fields = {"id": new_rating.get("butterflyId")}
            if not await self.get_butterflies(butterfly_fields):
                logger.warning("Rating rejected: unknown butterfly %s", butterfly_fields["id"])
                raise InvalidReferenceError(butterfly_fields)

            user_fields = {"id": new_rating.get("userId")}
            if not await self.get_users(user_fields):
                logger.warning("Rating rejected: unknown user %s", user_fields["id"])
                raise InvalidReferenceError(user_fields)

            rating_fields = {
                "userId": new_rating.get("userId"),
                "butterflyId": new_rating.get("butterflyId"),
            }
            result = await self.store.upsert(RATINGS, rating_fields, new_rating)
            logger.info(
                "Rating stored: user=%s butterfly=%s rating=%s",
                rating_fields["userId"],
                rating_fields["butterflyId"],
                result.get("rating"),
            )
            return result


# ── FastAPI Dependency ────────────────────────────────────────────────────
def get_butterfly_service(request: Request) -> ButterflyService:
    """The ButterflyService built by create_app for the running application."""
    return request.app.state.butterfly_service
