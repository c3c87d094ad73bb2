# small date helpers shared by services
# all calendar-day comparisons are done on utc dates

from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """treat naive datetimes as utc"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_date(value: datetime) -> date:
    return as_utc(value).date()


def patch_fields(body: BaseModel, nullable: frozenset[str] = frozenset()) -> dict[str, Any]:
    """fields the client actually sent, as plain values.
    an explicit null is kept only for fields that may be cleared."""
    sent = body.model_dump(exclude_unset=True)
    return {k: v for k, v in sent.items() if v is not None or k in nullable}
