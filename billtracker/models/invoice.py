"""Invoice and line-item models.

Money columns are NUMERIC(10,2) and surface as ``Decimal``; pydantic
serialises them as JSON strings ("137.50"), so no float ever crosses
the wire.
"""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import field_validator
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from billtracker.models.base import CreatedAtMixin, to_naive_utc, utcnow
from billtracker.models.client import ClientRead
from billtracker.models.company_settings import CompanySettingsRead
from billtracker.models.payment import PaymentRead


class InvoiceStatus(StrEnum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


# Statuses whose unpaid remainder counts as money owed
OPEN_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)


class Invoice(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("company_id", "number", name="uq_invoices_company_number"),
    )

    id: int | None = Field(default=None, primary_key=True)
    company_id: int = Field(foreign_key="companies.id", nullable=False, index=True)
    number: str = Field(max_length=50, nullable=False)
    client_id: int = Field(foreign_key="clients.id", nullable=False, index=True)
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT)

    subtotal: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)
    tax_rate: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    tax_amount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    total: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)

    due_date: datetime = Field(nullable=False)

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Overdue is derived: still marked sent, and the due date has passed."""
        return self.status == InvoiceStatus.SENT and self.due_date < (now or utcnow())


class InvoiceItem(SQLModel, table=True):
    __tablename__ = "invoice_items"

    id: int | None = Field(default=None, primary_key=True)
    invoice_id: int = Field(foreign_key="invoices.id", nullable=False, index=True)
    description: str = Field(nullable=False)
    quantity: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)
    rate: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)
    amount: Decimal = Field(max_digits=10, decimal_places=2, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class InvoiceItemCreate(SQLModel):
    description: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    rate: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    amount: Decimal | None = Field(
        default=None, description="Optional; checked against quantity × rate"
    )


class InvoiceCreate(SQLModel):
    number: str | None = Field(
        default=None, min_length=1, max_length=50, description="Assigned automatically when omitted"
    )
    client_id: int
    tax_rate: Decimal | None = Field(
        default=None, ge=0, le=100, description="Defaults to the company's default tax rate"
    )
    subtotal: Decimal | None = None
    tax_amount: Decimal | None = None
    total: Decimal | None = None
    due_date: datetime

    @field_validator("number", mode="before")
    @classmethod
    def _strip_number(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("due_date")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class InvoiceCreateRequest(SQLModel):
    invoice: InvoiceCreate
    items: list[InvoiceItemCreate] = Field(min_length=1)


class InvoiceUpdate(SQLModel):
    """Merge-patch of header fields. No lifecycle validation is applied."""

    number: str | None = Field(default=None, min_length=1, max_length=50)
    client_id: int | None = None
    status: InvoiceStatus | None = None
    subtotal: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    tax_amount: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    total: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    due_date: datetime | None = None

    @field_validator("number", mode="before")
    @classmethod
    def _strip_number(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("due_date")
    @classmethod
    def _naive_utc(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value) if value is not None else None


class InvoiceItemRead(SQLModel):
    id: int
    invoice_id: int
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class InvoiceRead(SQLModel):
    id: int
    company_id: int
    number: str
    client_id: int
    status: InvoiceStatus
    display_status: InvoiceStatus = Field(description="'overdue' when sent and past due")
    is_overdue: bool
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    due_date: datetime
    created_at: datetime


class InvoiceWithClient(InvoiceRead):
    client: ClientRead


class InvoiceDetail(InvoiceWithClient):
    items: list[InvoiceItemRead]
    payments: list[PaymentRead]
    amount_paid: Decimal
    balance_due: Decimal


class InvoiceDocument(SQLModel):
    """Everything a document renderer needs for one invoice."""

    invoice: InvoiceRead
    client: ClientRead
    items: list[InvoiceItemRead]
    settings: CompanySettingsRead
    amount_paid: Decimal
    balance_due: Decimal


def to_invoice_read(invoice: Invoice, now: datetime | None = None) -> InvoiceRead:
    overdue = invoice.is_overdue(now)
    return InvoiceRead(
        id=invoice.id,
        company_id=invoice.company_id,
        number=invoice.number,
        client_id=invoice.client_id,
        status=invoice.status,
        display_status=InvoiceStatus.OVERDUE if overdue else invoice.status,
        is_overdue=overdue,
        subtotal=invoice.subtotal,
        tax_rate=invoice.tax_rate,
        tax_amount=invoice.tax_amount,
        total=invoice.total,
        due_date=invoice.due_date,
        created_at=invoice.created_at,
    )
