"""
Butterfly API — Butterfly Route Handlers
=========================================

What:  GET /butterflies/{id} and POST /butterflies.
How:   Validate the body, assign an id, delegate to ButterflyService.
       An empty lookup result becomes a 404 here, not in the service.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from butterfly_api.exceptions import NotFoundError
from butterfly_api.ids import generate_id
from butterfly_api.schemas.records import Butterfly, ErrorResponse
from butterfly_api.services.butterfly_service import ButterflyService, get_butterfly_service
from butterfly_api.validators import validate_butterfly

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/butterflies", tags=["Butterflies"])


@router.get(
    "/{butterfly_id}",
    response_model=Butterfly,
    responses={404: {"description": "Butterfly not found", "model": ErrorResponse}},
    summary="Get a butterfly by ID",
)
async def get_butterfly(
    butterfly_id: str,
    service: ButterflyService = Depends(get_butterfly_service),
) -> Butterfly:
    butterflies = await service.get_butterflies({"id": butterfly_id})
    if not butterflies:
        raise NotFoundError(resource="butterfly", resource_id=butterfly_id)
    return butterflies[0]


@router.post(
    "",
    response_model=Butterfly,
    responses={400: {"description": "Invalid request body", "model": ErrorResponse}},
    summary="Create a butterfly",
    description="Stores a new butterfly and returns it with its generated id.",
)
async def create_butterfly(
    payload: Any = Body(default=None),
    service: ButterflyService = Depends(get_butterfly_service),
) -> Butterfly:
    fields = validate_butterfly(payload)
    new_butterfly = {"id": generate_id(), **fields}
    created = await service.insert_butterfly(new_butterfly)
    logger.info("Butterfly created: %s", created["id"])
    return created
