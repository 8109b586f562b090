"""
Butterfly API — Pydantic Request/Response Schemas
===================================================

What:  Pydantic models defining the API contract for butterflies, users and
       ratings, plus the shared message/error/health shapes.
How:   Request models are strict and forbid extra keys; validators.py runs
       them and turns failures into ValidationError. Response models feed
       FastAPI's serialization and the OpenAPI docs.

Field names are camelCase because they are the stored JSON field names.
"""

from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

RATING_MIN = 0
RATING_MAX = 5


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What clients send
# ══════════════════════════════════════════════════════════════════════════


class ButterflyCreate(BaseModel):
    """Body of POST /butterflies. The id is assigned by the server."""
    model_config = ConfigDict(extra="forbid", strict=True)

    commonName: str = Field(description="Common name, e.g. 'Plum Judy'")
    species: str = Field(description="Scientific name, e.g. 'Abisara echerius'")
    article: str = Field(description="URL of an article about the species")


class UserCreate(BaseModel):
    """Body of POST /users. The id is assigned by the server."""
    model_config = ConfigDict(extra="forbid", strict=True)

    username: str = Field(description="Display name")


class RatingUpsert(BaseModel):
    """
    Body of PUT /ratings.

    rating accepts ints and floats (never booleans) and keeps the type it was
    sent with, so ``5`` is stored as ``5`` rather than ``5.0``.
    """
    model_config = ConfigDict(extra="forbid", strict=True)

    userId: str = Field(description="Id of an existing user")
    butterflyId: str = Field(description="Id of an existing butterfly")
    rating: Union[StrictInt, StrictFloat] = Field(description="Score from 0 to 5 inclusive")

    @field_validator("rating")
    @classmethod
    def validate_rating_range(cls, v: Union[int, float]) -> Union[int, float]:
        if not RATING_MIN <= v <= RATING_MAX:
            raise ValueError(f"rating must be between {RATING_MIN} and {RATING_MAX}")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class Butterfly(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    commonName: str
    species: str
    article: str


class User(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    username: str


class Rating(BaseModel):
    model_config = ConfigDict(extra="allow")

    userId: str
    butterflyId: str
    rating: Union[int, float]


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable status message")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "invalid_reference",
            "message": "Invalid field details {\"id\":\"abc123\"}",
            "details": {"fields": {"id": "abc123"}},
            "request_id": "1f0c9a2b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database state: loaded or not_loaded")
    database_path: str = Field(description="Location of the JSON document")
    collections: Dict[str, int] = Field(description="Record count per collection")
    uptime_seconds: float = Field(description="Seconds since service started")
