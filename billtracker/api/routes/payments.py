"""Payment endpoints."""

from fastapi import APIRouter, status

from billtracker.api.deps import Auth, Session
from billtracker.models.payment import PaymentCreate, PaymentRead
from billtracker.services import payments as payment_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=list[PaymentRead])
async def list_payments(
    auth: Auth,
    session: Session,
    invoice_id: int | None = None,
) -> list[PaymentRead]:
    rows = await payment_service.list_payments(session, auth.company_id, invoice_id)
    return [PaymentRead.model_validate(p) for p in rows]


@router.post("", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
async def record_payment(body: PaymentCreate, auth: Auth, session: Session) -> PaymentRead:
    """Record a payment; the invoice flips to paid once payments cover its total."""
    payment = await payment_service.record_payment(session, auth.company_id, body)
    return PaymentRead.model_validate(payment)
