"""Shared helpers for all models: timestamps and money."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlmodel import Field, SQLModel

CENT = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Store every timestamp as naive UTC, whatever offset the caller sent."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def money(value: Decimal | int | str) -> Decimal:
    """Quantize to two decimal places, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class CreatedAtMixin(SQLModel):
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
