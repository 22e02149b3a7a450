"""
Shared validators for input sanitization and time normalization.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from shared.config.constants import Limits

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def validate_quantity(
    quantity: int,
    min_val: int = Limits.MIN_QUANTITY,
    max_val: int = Limits.MAX_QUANTITY,
) -> int:
    """
    Validate an order line quantity is within the accepted range.

    Raises:
        ValueError: If quantity is outside allowed range
    """
    if quantity < min_val:
        raise ValueError(f"Quantity must be at least {min_val}")
    if quantity > max_val:
        raise ValueError(f"Quantity must be at most {max_val}")
    return quantity


def sanitize_text(value: Optional[str], max_length: int = Limits.MAX_NOTES_LENGTH) -> Optional[str]:
    """
    Sanitize free text (notes, instructions, reasons).

    Strips surrounding whitespace and control characters (newlines and tabs
    are kept). Empty input becomes None.
    """
    if value is None:
        return None

    value = _CONTROL_CHARS.sub("", value).strip()
    if not value:
        return None

    if len(value) > max_length:
        raise ValueError(f"Text too long (max {max_length} characters)")
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are taken to already be UTC. SQLite hands naive values
    back from DateTime(timezone=True) columns, so everything read from or
    compared against the database passes through here.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
