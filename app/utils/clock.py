"""Time helpers shared by the domain layer."""

from datetime import (
    UTC,
    datetime,
)
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC.

    Naive values are taken to already be UTC, which is how Firestore
    timestamps written by older clients come back.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
