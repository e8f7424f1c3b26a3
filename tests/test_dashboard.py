"""Tests for dashboard aggregates."""

import pytest

from helpers import past


async def _stats(tenant) -> dict:
    resp = await tenant.get("/api/dashboard/stats")
    assert resp.status_code == 200
    return resp.json()


@pytest.mark.asyncio
async def test_empty_company_dashboard(make_company):
    acme = await make_company("acme-empty")

    stats = await _stats(acme)
    assert stats == {
        "total_income": "0.00",
        "due_amount": "0.00",
        "due_count": 0,
        "overdue_count": 0,
        "recent_transactions": [],
    }


@pytest.mark.asyncio
async def test_due_amount_subtracts_partial_payments(make_company):
    """Sent invoices of 100 and 200 with 50 paid on the second leave 250 due."""
    acme = await make_company("acme-due")
    customer = await acme.create_client()
    await acme.create_invoice(customer["id"], items=[("1", "100")])
    big = await acme.create_invoice(customer["id"], items=[("1", "200")])
    await acme.pay(big["id"], "50.00")

    stats = await _stats(acme)
    assert stats["due_amount"] == "250.00"
    assert stats["due_count"] == 2
    assert stats["total_income"] == "50.00"


@pytest.mark.asyncio
async def test_paid_invoices_are_not_due(make_company):
    acme = await make_company("acme-paid")
    customer = await acme.create_client()
    settled = await acme.create_invoice(customer["id"], items=[("1", "100")])
    marked = await acme.create_invoice(customer["id"], items=[("1", "70")])
    open_invoice = await acme.create_invoice(customer["id"], items=[("1", "30")])

    await acme.pay(settled["id"], "100.00")
    # Marked paid by hand, no payment rows behind it
    resp = await acme.put(f"/api/invoices/{marked['id']}", {"status": "paid"})
    assert resp.status_code == 200

    stats = await _stats(acme)
    assert stats["due_amount"] == "30.00"
    assert stats["due_count"] == 1
    assert stats["total_income"] == "100.00"
    assert open_invoice["status"] == "sent"


@pytest.mark.asyncio
async def test_draft_invoices_are_not_due(make_company):
    acme = await make_company("acme-draft")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"])
    await acme.put(f"/api/invoices/{invoice['id']}", {"status": "draft"})

    stats = await _stats(acme)
    assert stats["due_amount"] == "0.00"
    assert stats["due_count"] == 0


@pytest.mark.asyncio
async def test_overdue_count(make_company):
    acme = await make_company("acme-late")
    customer = await acme.create_client()
    await acme.create_invoice(customer["id"], due_date=past(5))
    await acme.create_invoice(customer["id"], due_date=past(40))
    await acme.create_invoice(customer["id"])

    stats = await _stats(acme)
    assert stats["due_count"] == 3
    assert stats["overdue_count"] == 2


@pytest.mark.asyncio
async def test_recent_transactions_newest_first_and_capped(make_company):
    acme = await make_company("acme-recent")
    customer = await acme.create_client("Initech")
    invoice = await acme.create_invoice(customer["id"], items=[("1", "1000")])

    for day in range(1, 13):
        resp = await acme.pay(
            invoice["id"], f"{day}.00", payment_date=f"2026-02-{day:02d}T12:00:00"
        )
        assert resp.status_code == 201

    recent = (await _stats(acme))["recent_transactions"]
    assert len(recent) == 10
    assert [t["amount"] for t in recent] == [f"{d}.00" for d in range(12, 2, -1)]
    assert recent[0]["invoice_number"] == invoice["number"]
    assert recent[0]["client_name"] == "Initech"
    assert recent[0]["client_id"] == customer["id"]
    assert recent[0]["payment_date"] == "2026-02-12T12:00:00"


@pytest.mark.asyncio
async def test_dashboard_is_company_scoped(make_company):
    acme = await make_company("acme-dash")
    globex = await make_company("globex-dash")
    customer = await acme.create_client()
    invoice = await acme.create_invoice(customer["id"], items=[("1", "500")])
    await acme.pay(invoice["id"], "100.00")

    stats = await _stats(globex)
    assert stats["total_income"] == "0.00"
    assert stats["due_amount"] == "0.00"
    assert stats["recent_transactions"] == []

    stats = await _stats(acme)
    assert stats["total_income"] == "100.00"
    assert stats["due_amount"] == "400.00"
