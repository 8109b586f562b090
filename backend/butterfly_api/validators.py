"""
Butterfly API — Request Body Validators
=========================================

What:  Field-shape checks for butterfly, user and rating payloads.
How:   Reject unknown keys first, then run the strict Pydantic request model
       and translate its errors into one descriptive ValidationError.
Who:   Called by route handlers before a payload reaches ButterflyService.

Messages:
    "The following keys are invalid: extra"
    "The following properties have invalid values: username is required."
    "... commonName must be a string."
    "... rating must be a number between 0 & 5 (inclusive)."
"""

from typing import Any, Dict, List, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from butterfly_api.exceptions import ValidationError
from butterfly_api.schemas.records import (
    RATING_MAX,
    RATING_MIN,
    ButterflyCreate,
    RatingUpsert,
    UserCreate,
)

NUMERIC_FIELDS = {
    "rating": f"rating must be a number between {RATING_MIN} & {RATING_MAX} (inclusive).",
}


def _describe(error: Dict[str, Any]) -> str:
    """One sentence for one Pydantic error entry."""
    field = str(error["loc"][0]) if error.get("loc") else "body"
    if error.get("type") == "missing":
        return f"{field} is required."
    if field in NUMERIC_FIELDS:
        return NUMERIC_FIELDS[field]
    return f"{field} must be a string."


def _validate(model: Type[BaseModel], payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError(message="Request body must be a JSON object")

    invalid_keys: List[str] = [key for key in payload if key not in model.model_fields]
    if invalid_keys:
        raise ValidationError(
            message=f"The following keys are invalid: {', '.join(invalid_keys)}",
            context={"invalid_keys": invalid_keys},
        )

    try:
        validated = model.model_validate(payload)
    except PydanticValidationError as exc:
        # One entry per field: a Union field reports once per member type.
        by_field: Dict[str, str] = {}
        for err in exc.errors():
            field = str(err["loc"][0]) if err.get("loc") else "body"
            by_field.setdefault(field, _describe(err))
        problems = list(by_field.values())
        fields = [field for field in by_field if field != "body"]
        raise ValidationError(
            message="The following properties have invalid values: " + " ".join(problems),
            field=fields[0] if fields else None,
            context={"problems": problems},
        ) from exc

    return validated.model_dump()


def validate_butterfly(payload: Any) -> Dict[str, Any]:
    """Validated copy of a new butterfly body (commonName, species, article)."""
    return _validate(ButterflyCreate, payload)


def validate_user(payload: Any) -> Dict[str, Any]:
    """Validated copy of a new user body (username)."""
    return _validate(UserCreate, payload)


def validate_rating(payload: Any) -> Dict[str, Any]:
    """Validated copy of a rating body (userId, butterflyId, rating in [0, 5])."""
    return _validate(RatingUpsert, payload)
