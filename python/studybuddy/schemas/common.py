"""Shared field types for request/response schemas."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator


def _as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Timezone-aware UTC datetime. The store compares times, and comparing naive
# with aware datetimes raises TypeError.
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
