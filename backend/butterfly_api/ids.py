"""Short unique identifiers for new butterflies and users."""

import uuid

ID_LENGTH = 10


def generate_id() -> str:
    """A fresh 10-character hex id."""
    return uuid.uuid4().hex[:ID_LENGTH]
