"""
Butterfly API — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right HTTP status.
Who:   Raised by validators, services and routes; caught by global handlers.

Exception Hierarchy:
    ButterflyAPIError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    └── InvalidReferenceError    → 401 (rating points at a missing record)

Persistence failures (OSError, malformed JSON on disk) are deliberately NOT
part of this hierarchy: they propagate unchanged from the database layer and
are answered by the catch-all handler.
"""

import json
from typing import Any, Dict, Optional


class ButterflyAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged and returned as "details")
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(self.message)


class ValidationError(ButterflyAPIError):
    """
    Raised when a request body fails field-shape validation.

    When:    Missing required fields, wrong primitive types, unexpected extra
             fields, or a rating outside [0, 5].
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "The following keys are invalid: extra",
            "details": {"invalid_keys": ["extra"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ButterflyAPIError):
    """
    Raised by the route layer when a lookup returned nothing.

    The services never raise this: an empty result sequence is the soft
    not-found signal inside the core, and routes convert it here.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidReferenceError(ButterflyAPIError):
    """
    Raised when a rating references a butterfly or user that does not exist.

    The message embeds the exact single-field lookup that failed, serialized
    as compact JSON, e.g. ``Invalid field details {"id":"abc123"}``.
    HTTP:    401 (status kept from the original API contract)
    """

    def __init__(
        self,
        fields: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.fields = dict(fields)
        message = f"Invalid field details {json.dumps(self.fields, separators=(',', ':'), ensure_ascii=False)}"
        ctx = dict(context or {})
        ctx["fields"] = self.fields
        super().__init__(message=message, context=ctx)
