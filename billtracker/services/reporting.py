"""Dashboard aggregates, recomputed from source rows on every call."""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from billtracker.models.base import money, utcnow
from billtracker.models.client import Client
from billtracker.models.invoice import OPEN_STATUSES, Invoice, InvoiceStatus
from billtracker.models.payment import Payment

RECENT_TRANSACTIONS = 10


# ── Schemas ──────────────────────────────────────────────────

class RecentTransaction(BaseModel):
    id: int
    invoice_id: int
    invoice_number: str
    client_id: int
    client_name: str
    amount: Decimal
    payment_date: datetime
    notes: str | None


class DashboardStats(BaseModel):
    total_income: Decimal
    due_amount: Decimal
    due_count: int
    overdue_count: int
    recent_transactions: list[RecentTransaction]


class BillingStats(BaseModel):
    total_invoices: int
    paid_invoices: int
    pending_invoices: int
    overdue_invoices: int
    total_revenue: Decimal
    pending_amount: Decimal
    overdue_amount: Decimal
    collection_rate: int


# ── Helpers ──────────────────────────────────────────────────

async def _paid_by_invoice(session: AsyncSession, company_id: int | None) -> dict[int, Decimal]:
    stmt = select(Payment.invoice_id, Payment.amount).join(
        Invoice, Payment.invoice_id == Invoice.id
    )
    if company_id is not None:
        stmt = stmt.where(Invoice.company_id == company_id)
    paid: dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
    for invoice_id, amount in (await session.execute(stmt)).all():
        paid[invoice_id] += amount
    return paid


def outstanding(invoice: Invoice, paid: dict[int, Decimal]) -> Decimal:
    """Unpaid remainder of an open invoice; zero for draft and paid ones."""
    if invoice.status not in OPEN_STATUSES:
        return Decimal("0")
    remainder = invoice.total - paid.get(invoice.id, Decimal("0"))
    return remainder if remainder > 0 else Decimal("0")


def _is_overdue(invoice: Invoice, now: datetime) -> bool:
    return invoice.status == InvoiceStatus.OVERDUE or invoice.is_overdue(now)


# ── Aggregates ───────────────────────────────────────────────

async def dashboard_stats(
    session: AsyncSession, company_id: int, now: datetime | None = None
) -> DashboardStats:
    now = now or utcnow()
    paid = await _paid_by_invoice(session, company_id)

    invoices = (await session.execute(
        select(Invoice).where(Invoice.company_id == company_id)
    )).scalars().all()

    due_amount = Decimal("0")
    due_count = 0
    overdue_count = 0
    for invoice in invoices:
        remainder = outstanding(invoice, paid)
        if remainder <= 0:
            continue
        due_amount += remainder
        due_count += 1
        if _is_overdue(invoice, now):
            overdue_count += 1

    recent_stmt = (
        select(Payment, Invoice.number, Client.id, Client.name)
        .join(Invoice, Payment.invoice_id == Invoice.id)
        .join(Client, Invoice.client_id == Client.id)
        .where(Invoice.company_id == company_id)
        .order_by(
            Payment.payment_date.desc(),  # type: ignore[union-attr]
            Payment.id.desc(),  # type: ignore[union-attr]
        )
        .limit(RECENT_TRANSACTIONS)
    )
    recent = [
        RecentTransaction(
            id=payment.id,
            invoice_id=payment.invoice_id,
            invoice_number=number,
            client_id=client_id,
            client_name=client_name,
            amount=payment.amount,
            payment_date=payment.payment_date,
            notes=payment.notes,
        )
        for payment, number, client_id, client_name in (await session.execute(recent_stmt)).all()
    ]

    return DashboardStats(
        total_income=money(sum(paid.values(), Decimal("0"))),
        due_amount=money(due_amount),
        due_count=due_count,
        overdue_count=overdue_count,
        recent_transactions=recent,
    )


async def billing_stats(session: AsyncSession, now: datetime | None = None) -> BillingStats:
    """Invoice figures across every company, for the super-admin console."""
    now = now or utcnow()
    paid = await _paid_by_invoice(session, None)
    invoices = (await session.execute(select(Invoice))).scalars().all()

    paid_count = pending_count = overdue_count = 0
    revenue = pending_amount = overdue_amount = Decimal("0")
    for invoice in invoices:
        if invoice.status == InvoiceStatus.PAID:
            paid_count += 1
            revenue += invoice.total
        elif invoice.status in OPEN_STATUSES:
            if _is_overdue(invoice, now):
                overdue_count += 1
                overdue_amount += outstanding(invoice, paid)
            else:
                pending_count += 1
                pending_amount += outstanding(invoice, paid)

    total = len(invoices)
    return BillingStats(
        total_invoices=total,
        paid_invoices=paid_count,
        pending_invoices=pending_count,
        overdue_invoices=overdue_count,
        total_revenue=money(revenue),
        pending_amount=money(pending_amount),
        overdue_amount=money(overdue_amount),
        collection_rate=round(paid_count / total * 100) if total else 0,
    )
