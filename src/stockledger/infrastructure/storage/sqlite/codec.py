"""
Column codecs shared by the SQLite stores.

Decimals are stored as plain-notation TEXT so no value ever passes
through a float. Timestamps are stored as UTC ISO-8601 with a fixed
microsecond width so that text order equals time order.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal


def generate_id() -> str:
    """Generate a new UUID text ID."""
    return str(uuid.uuid4())


def decimal_to_text(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return format(value, "f")


def text_to_decimal(value: str | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(value)


def timestamp_to_text(value: datetime | None) -> str | None:
    """Naive datetimes are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def text_to_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)
