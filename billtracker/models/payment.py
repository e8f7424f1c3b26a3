"""Payment model: money received against one invoice."""

from datetime import datetime
from decimal import Decimal

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from billtracker.models.base import to_naive_utc, utcnow


class Payment(SQLModel, table=True):
    __tablename__ = "payments"

    id: int | None = Field(default=None, primary_key=True)
    invoice_id: int = Field(foreign_key="invoices.id", nullable=False, index=True)
    amount: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)
    payment_date: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    notes: str | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class PaymentCreate(SQLModel):
    invoice_id: int
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    payment_date: datetime | None = Field(
        default=None, description="Defaults to the time the payment is recorded"
    )
    notes: str | None = None

    @field_validator("payment_date")
    @classmethod
    def _naive_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value) if value is not None else None


class PaymentRead(SQLModel):
    id: int
    invoice_id: int
    amount: Decimal
    payment_date: datetime
    notes: str | None
