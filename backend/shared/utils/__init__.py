"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    ConflictError,
    InternalError,
)
from shared.utils.validators import (
    validate_quantity,
    sanitize_text,
    utcnow,
    to_utc,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "InternalError",
    # validators
    "validate_quantity",
    "sanitize_text",
    "utcnow",
    "to_utc",
    # schemas
    "ErrorResponse",
]
