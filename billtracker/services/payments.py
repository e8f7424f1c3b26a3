"""Payment recorder and paid-status reconciliation."""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from billtracker.core.database import unit_of_work
from billtracker.models.base import money, utcnow
from billtracker.models.invoice import Invoice, InvoiceStatus
from billtracker.models.payment import Payment, PaymentCreate
from billtracker.services.invoices import get_invoice_or_404

logger = logging.getLogger(__name__)


async def list_payments(
    session: AsyncSession, company_id: int, invoice_id: int | None = None
) -> list[Payment]:
    """Payments on the company's invoices, newest first."""
    stmt = (
        select(Payment)
        .join(Invoice, Payment.invoice_id == Invoice.id)
        .where(Invoice.company_id == company_id)
    )
    if invoice_id is not None:
        await get_invoice_or_404(session, company_id, invoice_id)
        stmt = stmt.where(Payment.invoice_id == invoice_id)
    stmt = stmt.order_by(
        Payment.payment_date.desc(),  # type: ignore[union-attr]
        Payment.id.desc(),  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def total_paid(session: AsyncSession, invoice_id: int) -> Decimal:
    result = await session.execute(
        select(Payment.amount).where(Payment.invoice_id == invoice_id)
    )
    return money(sum(result.scalars().all(), Decimal("0")))


async def reconcile_invoice_status(session: AsyncSession, invoice: Invoice) -> bool:
    """Mark the invoice paid once its payments cover the total.

    Recomputed from every payment row, so replaying the same payments is a
    no-op. Returns True when the status changed.
    """
    paid = await total_paid(session, invoice.id)
    if paid >= invoice.total and invoice.status != InvoiceStatus.PAID:
        logger.info(
            "Invoice %s paid in full (%s of %s), %s -> paid",
            invoice.id, paid, invoice.total, invoice.status,
        )
        invoice.status = InvoiceStatus.PAID
        session.add(invoice)
        return True
    return False


async def record_payment(session: AsyncSession, company_id: int, data: PaymentCreate) -> Payment:
    """Insert a payment and re-evaluate its invoice, in one transaction."""
    invoice = await get_invoice_or_404(session, company_id, data.invoice_id)

    async with unit_of_work(session):
        payment = Payment(
            invoice_id=invoice.id,
            amount=money(data.amount),
            payment_date=data.payment_date or utcnow(),
            notes=data.notes,
        )
        session.add(payment)
        await session.flush()
        await reconcile_invoice_status(session, invoice)

    await session.refresh(payment)
    logger.info(
        "Recorded payment %s of %s on invoice %s (company %s)",
        payment.id, payment.amount, invoice.id, company_id,
    )
    return payment
