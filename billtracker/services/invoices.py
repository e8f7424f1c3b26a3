"""Invoice ledger: numbering, creation, merge-patch updates, cascade delete.

Every entry point takes the acting ``company_id`` and never touches a row
of another company; foreign ids resolve to ``NotFoundError``.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from billtracker.core.config import get_settings
from billtracker.core.database import unit_of_work
from billtracker.core.errors import ConflictError, InvalidDataError, NotFoundError
from billtracker.models.base import CENT, money
from billtracker.models.client import Client, ClientRead
from billtracker.models.company_settings import CompanySettingsRead
from billtracker.models.invoice import (
    Invoice,
    InvoiceCreate,
    InvoiceDetail,
    InvoiceDocument,
    InvoiceItem,
    InvoiceItemCreate,
    InvoiceItemRead,
    InvoiceStatus,
    InvoiceUpdate,
    to_invoice_read,
)
from billtracker.models.payment import Payment, PaymentRead
from billtracker.services.clients import get_client
from billtracker.services.settings_store import get_company_settings

logger = logging.getLogger(__name__)

_MONEY_FIELDS = ("subtotal", "tax_rate", "tax_amount", "total")
_NOT_NULL = ("number", "client_id", "status", "due_date", *_MONEY_FIELDS)

# Largest value a NUMERIC(10,2) column holds
MAX_AMOUNT = Decimal("99999999.99")


# ── Numbering ────────────────────────────────────────────────

def _number_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}-(\d+)$")


def format_invoice_number(sequence: int, prefix: str | None = None, width: int | None = None) -> str:
    config = get_settings()
    prefix = prefix or config.invoice_number_prefix
    width = width or config.invoice_number_width
    return f"{prefix}-{sequence:0{width}d}"


def parse_invoice_number(number: str, prefix: str | None = None) -> int | None:
    """Numeric suffix of a conforming number, or None for legacy/manual ones."""
    match = _number_pattern(prefix or get_settings().invoice_number_prefix).match(number)
    return int(match.group(1)) if match else None


def next_number_after(numbers: Iterable[str]) -> str:
    """One past the highest conforming number; non-conforming ones are ignored."""
    highest = 0
    for number in numbers:
        sequence = parse_invoice_number(number)
        if sequence is not None and sequence > highest:
            highest = sequence
    return format_invoice_number(highest + 1)


async def next_invoice_number(session: AsyncSession, company_id: int) -> str:
    result = await session.execute(
        select(Invoice.number).where(Invoice.company_id == company_id)
    )
    return next_number_after(result.scalars().all())


async def _number_taken(session: AsyncSession, company_id: int, number: str) -> bool:
    result = await session.execute(
        select(Invoice.id).where(
            Invoice.company_id == company_id,
            Invoice.number == number,
        )
    )
    return result.first() is not None


# ── Money ────────────────────────────────────────────────────

@dataclass(frozen=True)
class InvoiceTotals:
    line_amounts: list[Decimal]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_totals(items: Sequence[InvoiceItemCreate], tax_rate: Decimal) -> InvoiceTotals:
    line_amounts = [money(item.quantity * item.rate) for item in items]
    subtotal = money(sum(line_amounts, Decimal("0")))
    tax_rate = money(tax_rate)
    tax_amount = money(subtotal * tax_rate / 100)
    return InvoiceTotals(
        line_amounts=line_amounts,
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def check_amount_limits(totals: InvoiceTotals) -> None:
    """Reject derived amounts that would overflow a NUMERIC(10,2) column."""
    errors = []
    for index, amount in enumerate(totals.line_amounts):
        if amount > MAX_AMOUNT:
            errors.append({
                "loc": ["items", index, "amount"],
                "msg": f"Line amount {amount} exceeds {MAX_AMOUNT}",
            })
    for field in ("subtotal", "tax_amount", "total"):
        amount = getattr(totals, field)
        if amount > MAX_AMOUNT:
            errors.append({"loc": ["invoice", field], "msg": f"{amount} exceeds {MAX_AMOUNT}"})
    if errors:
        raise InvalidDataError("Invoice amounts are too large", errors)


def check_supplied_amounts(
    data: InvoiceCreate, items: Sequence[InvoiceItemCreate], totals: InvoiceTotals
) -> None:
    """Reject caller-computed figures that disagree with ours by more than a cent."""
    errors = []
    for index, (item, expected) in enumerate(zip(items, totals.line_amounts)):
        if item.amount is not None and abs(item.amount - expected) > CENT:
            errors.append({
                "loc": ["items", index, "amount"],
                "msg": f"Expected quantity × rate = {expected}",
            })
    for field in ("subtotal", "tax_amount", "total"):
        supplied = getattr(data, field)
        expected = getattr(totals, field)
        if supplied is not None and abs(supplied - expected) > CENT:
            errors.append({"loc": ["invoice", field], "msg": f"Expected {expected}"})
    if errors:
        raise InvalidDataError("Invoice amounts do not add up", errors)


# ── Reads ────────────────────────────────────────────────────

async def get_invoice_or_404(session: AsyncSession, company_id: int, invoice_id: int) -> Invoice:
    stmt = select(Invoice).where(
        Invoice.id == invoice_id,
        Invoice.company_id == company_id,
    )
    result = await session.execute(stmt)
    invoice = result.scalar_one_or_none()
    if invoice is None:
        raise NotFoundError("Invoice")
    return invoice


async def list_invoices(session: AsyncSession, company_id: int) -> list[tuple[Invoice, Client]]:
    stmt = (
        select(Invoice, Client)
        .join(Client, Invoice.client_id == Client.id)
        .where(Invoice.company_id == company_id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return [(invoice, client) for invoice, client in result.all()]


async def list_items(session: AsyncSession, invoice_id: int) -> list[InvoiceItem]:
    result = await session.execute(
        select(InvoiceItem)
        .where(InvoiceItem.invoice_id == invoice_id)
        .order_by(InvoiceItem.id.asc())  # type: ignore[union-attr]
    )
    return list(result.scalars().all())


async def list_invoice_payments(session: AsyncSession, invoice_id: int) -> list[Payment]:
    result = await session.execute(
        select(Payment)
        .where(Payment.invoice_id == invoice_id)
        .order_by(Payment.payment_date.asc(), Payment.id.asc())  # type: ignore[union-attr]
    )
    return list(result.scalars().all())


async def get_invoice_detail(
    session: AsyncSession, company_id: int, invoice_id: int
) -> InvoiceDetail:
    invoice = await get_invoice_or_404(session, company_id, invoice_id)
    client = await get_client(session, company_id, invoice.client_id)
    items = await list_items(session, invoice.id)
    payments = await list_invoice_payments(session, invoice.id)
    amount_paid = sum((p.amount for p in payments), Decimal("0"))

    return InvoiceDetail(
        **to_invoice_read(invoice).model_dump(),
        client=ClientRead.model_validate(client),
        items=[InvoiceItemRead.model_validate(i) for i in items],
        payments=[PaymentRead.model_validate(p) for p in payments],
        amount_paid=money(amount_paid),
        balance_due=money(invoice.total - amount_paid),
    )


async def invoice_document(
    session: AsyncSession, company_id: int, invoice_id: int
) -> InvoiceDocument:
    """The invoice + items + client + settings bundle for document rendering."""
    invoice = await get_invoice_or_404(session, company_id, invoice_id)
    client = await get_client(session, company_id, invoice.client_id)
    items = await list_items(session, invoice.id)
    payments = await list_invoice_payments(session, invoice.id)
    settings_row = await get_company_settings(session, company_id)
    amount_paid = sum((p.amount for p in payments), Decimal("0"))

    return InvoiceDocument(
        invoice=to_invoice_read(invoice),
        client=ClientRead.model_validate(client),
        items=[InvoiceItemRead.model_validate(i) for i in items],
        settings=CompanySettingsRead.model_validate(settings_row),
        amount_paid=money(amount_paid),
        balance_due=money(invoice.total - amount_paid),
    )


# ── Writes ───────────────────────────────────────────────────

async def _insert_invoice(
    session: AsyncSession,
    company_id: int,
    number: str,
    data: InvoiceCreate,
    items: Sequence[InvoiceItemCreate],
    totals: InvoiceTotals,
) -> Invoice:
    async with unit_of_work(session):
        invoice = Invoice(
            company_id=company_id,
            number=number,
            client_id=data.client_id,
            # New invoices count toward the amount due straight away
            status=InvoiceStatus.SENT,
            subtotal=totals.subtotal,
            tax_rate=totals.tax_rate,
            tax_amount=totals.tax_amount,
            total=totals.total,
            due_date=data.due_date,
        )
        session.add(invoice)
        await session.flush()  # populate invoice.id

        for item, amount in zip(items, totals.line_amounts):
            session.add(InvoiceItem(
                invoice_id=invoice.id,
                description=item.description,
                quantity=money(item.quantity),
                rate=money(item.rate),
                amount=amount,
            ))

    await session.refresh(invoice)
    return invoice


async def create_invoice(
    session: AsyncSession,
    company_id: int,
    data: InvoiceCreate,
    items: Sequence[InvoiceItemCreate],
) -> Invoice:
    """Insert an invoice and its items atomically.

    When ``data.number`` is omitted the next number is derived from the
    company's existing ones; a collision with a concurrent insert is retried
    with a freshly derived number.
    """
    await get_client(session, company_id, data.client_id)

    tax_rate = data.tax_rate
    if tax_rate is None:
        tax_rate = (await get_company_settings(session, company_id)).default_tax_rate
    totals = compute_totals(items, tax_rate)
    check_amount_limits(totals)
    check_supplied_amounts(data, items, totals)

    if data.number is not None:
        number = data.number
        if await _number_taken(session, company_id, number):
            raise ConflictError(f"Invoice number '{number}' is already in use")
        try:
            invoice = await _insert_invoice(session, company_id, number, data, items, totals)
        except IntegrityError as exc:
            raise ConflictError(f"Invoice number '{number}' is already in use") from exc
    else:
        attempts = max(get_settings().invoice_number_retries, 1)
        for attempt in range(1, attempts + 1):
            number = await next_invoice_number(session, company_id)
            try:
                invoice = await _insert_invoice(session, company_id, number, data, items, totals)
                break
            except IntegrityError as exc:
                if attempt == attempts:
                    raise ConflictError("Could not assign a unique invoice number") from exc
                logger.warning(
                    "Invoice number %s collided for company %s, retrying", number, company_id
                )

    logger.info(
        "Created invoice %s (%s) for company %s, total %s",
        invoice.id, invoice.number, company_id, invoice.total,
    )
    return invoice


async def update_invoice(
    session: AsyncSession, company_id: int, invoice_id: int, data: InvoiceUpdate
) -> Invoice:
    """Merge-patch header fields.

    Status moves are not validated (a paid invoice can be set back to
    draft) and totals are not re-derived.
    """
    invoice = await get_invoice_or_404(session, company_id, invoice_id)

    update_data = data.model_dump(exclude_unset=True)
    for field in _NOT_NULL:
        if update_data.get(field) is None:
            update_data.pop(field, None)

    if "client_id" in update_data:
        await get_client(session, company_id, update_data["client_id"])
    if "number" in update_data:
        if update_data["number"] != invoice.number and await _number_taken(
            session, company_id, update_data["number"]
        ):
            raise ConflictError(f"Invoice number '{update_data['number']}' is already in use")
    for field in _MONEY_FIELDS:
        if field in update_data:
            update_data[field] = money(update_data[field])

    for field, value in update_data.items():
        setattr(invoice, field, value)

    session.add(invoice)
    await session.commit()
    await session.refresh(invoice)
    return invoice


async def delete_invoice(session: AsyncSession, company_id: int, invoice_id: int) -> None:
    """Delete items, then payments, then the invoice, in one transaction."""
    invoice = await get_invoice_or_404(session, company_id, invoice_id)

    async with unit_of_work(session):
        await session.execute(delete(InvoiceItem).where(InvoiceItem.invoice_id == invoice.id))
        await session.execute(delete(Payment).where(Payment.invoice_id == invoice.id))
        await session.delete(invoice)

    logger.info("Deleted invoice %s of company %s", invoice_id, company_id)
