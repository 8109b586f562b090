"""
Butterfly API — Rating Route Handlers
======================================

What:  GET /ratings/{user_id} (a user's ratings, sorted) and PUT /ratings
       (create or replace the rating for a user/butterfly pair).
How:   PUT validates the body shape, then ButterflyService.upsert_rating
       checks that both referenced records exist. A missing reference is
       raised as InvalidReferenceError and answered by the global handler.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Query

from butterfly_api.exceptions import NotFoundError
from butterfly_api.schemas.records import ErrorResponse, MessageResponse, Rating
from butterfly_api.services.butterfly_service import (
    DESCENDING,
    ButterflyService,
    get_butterfly_service,
)
from butterfly_api.validators import validate_rating

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.get(
    "/{user_id}",
    response_model=List[Rating],
    responses={404: {"description": "User has no ratings", "model": ErrorResponse}},
    summary="List a user's ratings",
    description=(
        "Returns every rating the user gave, sorted by score. "
        "order=asc sorts lowest first; any other value sorts highest first."
    ),
)
async def list_ratings(
    user_id: str,
    order: str = Query(default=DESCENDING, description="'asc' or 'desc' (default)"),
    service: ButterflyService = Depends(get_butterfly_service),
) -> List[Rating]:
    ratings = await service.get_ratings({"userId": user_id}, order)
    if not ratings:
        raise NotFoundError(resource="ratings for user", resource_id=user_id)
    return ratings


@router.put(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid request body", "model": ErrorResponse},
        401: {"description": "Unknown user or butterfly", "model": ErrorResponse},
    },
    summary="Create or replace a rating",
)
async def upsert_rating(
    payload: Any = Body(default=None),
    service: ButterflyService = Depends(get_butterfly_service),
) -> MessageResponse:
    new_rating = validate_rating(payload)
    await service.upsert_rating(new_rating)
    return MessageResponse(message="successfully updated")
