"""
Butterfly API — User Route Handlers
====================================

What:  GET /users/{id} and POST /users.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from butterfly_api.exceptions import NotFoundError
from butterfly_api.ids import generate_id
from butterfly_api.schemas.records import ErrorResponse, User
from butterfly_api.services.butterfly_service import ButterflyService, get_butterfly_service
from butterfly_api.validators import validate_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/{user_id}",
    response_model=User,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user by ID",
)
async def get_user(
    user_id: str,
    service: ButterflyService = Depends(get_butterfly_service),
) -> User:
    users = await service.get_users({"id": user_id})
    if not users:
        raise NotFoundError(resource="user", resource_id=user_id)
    return users[0]


@router.post(
    "",
    response_model=User,
    responses={400: {"description": "Invalid request body", "model": ErrorResponse}},
    summary="Create a user",
)
async def create_user(
    payload: Any = Body(default=None),
    service: ButterflyService = Depends(get_butterfly_service),
) -> User:
    fields = validate_user(payload)
    created = await service.insert_user({"id": generate_id(), **fields})
    logger.info("User created: %s", created["id"])
    return created
