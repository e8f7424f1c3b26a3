"""Tests for payment recording and paid-status reconciliation."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from billtracker.models.invoice import InvoiceStatus
from billtracker.services.invoices import get_invoice_or_404
from billtracker.services.payments import reconcile_invoice_status, total_paid


async def _status(tenant, invoice_id: int) -> str:
    resp = await tenant.get(f"/api/invoices/{invoice_id}")
    assert resp.status_code == 200
    return resp.json()["status"]


@pytest.mark.asyncio
async def test_full_payment_marks_invoice_paid(make_company):
    acme = await make_company("acme-full")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    resp = await acme.pay(invoice["id"], "100.00", notes="Bank transfer")
    assert resp.status_code == 201
    payment = resp.json()
    assert payment["amount"] == "100.00"
    assert payment["notes"] == "Bank transfer"
    assert payment["invoice_id"] == invoice["id"]

    assert await _status(acme, invoice["id"]) == "paid"


@pytest.mark.asyncio
@pytest.mark.parametrize("amounts", [("40.00", "60.00"), ("60.00", "40.00")])
async def test_partial_payments_accumulate(make_company, amounts):
    """Order doesn't matter: the status flips when the sum reaches the total."""
    acme = await make_company("acme-partial")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    first, second = amounts
    assert (await acme.pay(invoice["id"], first)).status_code == 201
    assert await _status(acme, invoice["id"]) == "sent"

    assert (await acme.pay(invoice["id"], second)).status_code == 201
    assert await _status(acme, invoice["id"]) == "paid"


@pytest.mark.asyncio
async def test_partial_payment_leaves_balance(make_company):
    acme = await make_company("acme-balance")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    await acme.pay(invoice["id"], "60.00")

    detail = (await acme.get(f"/api/invoices/{invoice['id']}")).json()
    assert detail["status"] == "sent"
    assert detail["amount_paid"] == "60.00"
    assert detail["balance_due"] == "40.00"
    assert len(detail["payments"]) == 1


@pytest.mark.asyncio
async def test_overpayment_still_marks_paid(make_company):
    acme = await make_company("acme-over")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    await acme.pay(invoice["id"], "150.00")
    assert await _status(acme, invoice["id"]) == "paid"


@pytest.mark.asyncio
async def test_payment_on_foreign_invoice_is_not_found(make_company):
    acme = await make_company("acme-pay")
    intruder = await make_company("intruder-pay")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    resp = await intruder.pay(invoice["id"], "100.00")
    assert resp.status_code == 404
    assert await _status(acme, invoice["id"]) == "sent"


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-5.00", "12.345"])
async def test_invalid_amount_is_rejected(make_company, amount):
    acme = await make_company("acme-badamount")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    resp = await acme.pay(invoice["id"], amount)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_payments_filtered_by_invoice(make_company):
    acme = await make_company("acme-listpay")
    customer = await acme.create_client()
    first = await acme.create_invoice(customer["id"])
    second = await acme.create_invoice(customer["id"])

    await acme.pay(first["id"], "10.00", payment_date="2026-01-01T10:00:00")
    await acme.pay(first["id"], "20.00", payment_date="2026-01-02T10:00:00")
    await acme.pay(second["id"], "30.00", payment_date="2026-01-03T10:00:00")

    resp = await acme.get("/api/payments")
    assert [p["amount"] for p in resp.json()] == ["30.00", "20.00", "10.00"]

    resp = await acme.get("/api/payments", params={"invoice_id": first["id"]})
    assert resp.status_code == 200
    assert [p["amount"] for p in resp.json()] == ["20.00", "10.00"]


@pytest.mark.asyncio
async def test_list_payments_for_foreign_invoice(make_company):
    acme = await make_company("acme-listforeign")
    other = await make_company("other-listforeign")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])
    await acme.pay(invoice["id"], "10.00")

    resp = await other.get("/api/payments", params={"invoice_id": invoice["id"]})
    assert resp.status_code == 404
    resp = await other.get("/api/payments")
    assert resp.json() == []


@pytest.mark.asyncio
async def test_payment_date_is_kept(make_company):
    acme = await make_company("acme-date")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    resp = await acme.pay(invoice["id"], "5.00", payment_date="2026-03-15T09:30:00Z")
    assert resp.status_code == 201
    assert resp.json()["payment_date"] == "2026-03-15T09:30:00"


@pytest.mark.asyncio
async def test_offset_payment_date_is_stored_as_utc(make_company):
    acme = await make_company("acme-tz")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])

    resp = await acme.pay(invoice["id"], "5.00", payment_date="2026-03-15T15:00:00+05:30")
    assert resp.status_code == 201
    assert resp.json()["payment_date"] == "2026-03-15T09:30:00"

    resp = await acme.get("/api/payments")
    assert [p["payment_date"] for p in resp.json()] == ["2026-03-15T09:30:00"]


@pytest.mark.asyncio
async def test_reconcile_is_idempotent(make_company, session: AsyncSession):
    acme = await make_company("acme-idem")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])
    await acme.pay(invoice["id"], "100.00")

    row = await get_invoice_or_404(session, acme.company_id, invoice["id"])
    assert row.status == InvoiceStatus.PAID
    assert await total_paid(session, row.id) == row.total

    assert await reconcile_invoice_status(session, row) is False
    assert await reconcile_invoice_status(session, row) is False
    assert row.status == InvoiceStatus.PAID
