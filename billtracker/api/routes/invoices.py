"""Invoice endpoints: numbering, CRUD and the document bundle."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from billtracker.api.deps import Auth, Session
from billtracker.models.client import ClientRead
from billtracker.models.invoice import (
    InvoiceCreateRequest,
    InvoiceDetail,
    InvoiceDocument,
    InvoiceRead,
    InvoiceUpdate,
    InvoiceWithClient,
    to_invoice_read,
)
from billtracker.services import invoices as invoice_service

router = APIRouter(prefix="/invoices", tags=["invoices"])


class NextNumberResponse(BaseModel):
    number: str


# Declared before /{invoice_id} so the literal path wins
@router.get("/next-number", response_model=NextNumberResponse)
async def get_next_number(auth: Auth, session: Session) -> NextNumberResponse:
    """Preview the number the next auto-numbered invoice would get."""
    number = await invoice_service.next_invoice_number(session, auth.company_id)
    return NextNumberResponse(number=number)


@router.get("", response_model=list[InvoiceWithClient])
async def list_invoices(auth: Auth, session: Session) -> list[InvoiceWithClient]:
    rows = await invoice_service.list_invoices(session, auth.company_id)
    return [
        InvoiceWithClient(
            **to_invoice_read(invoice).model_dump(),
            client=ClientRead.model_validate(client),
        )
        for invoice, client in rows
    ]


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    body: InvoiceCreateRequest,
    auth: Auth,
    session: Session,
) -> InvoiceRead:
    """Create an invoice with its line items.

    Totals are derived from the items; any figures the caller sends along
    must agree with them to the cent.
    """
    invoice = await invoice_service.create_invoice(
        session, auth.company_id, body.invoice, body.items
    )
    return to_invoice_read(invoice)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
async def get_invoice(invoice_id: int, auth: Auth, session: Session) -> InvoiceDetail:
    return await invoice_service.get_invoice_detail(session, auth.company_id, invoice_id)


@router.get("/{invoice_id}/document", response_model=InvoiceDocument)
@router.get("/{invoice_id}/pdf", response_model=InvoiceDocument, include_in_schema=False)
async def get_invoice_document(
    invoice_id: int,
    auth: Auth,
    session: Session,
) -> InvoiceDocument:
    """Invoice, items, client and company settings for document rendering."""
    return await invoice_service.invoice_document(session, auth.company_id, invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceRead)
async def update_invoice(
    invoice_id: int,
    body: InvoiceUpdate,
    auth: Auth,
    session: Session,
) -> InvoiceRead:
    invoice = await invoice_service.update_invoice(session, auth.company_id, invoice_id, body)
    return to_invoice_read(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: int, auth: Auth, session: Session) -> None:
    await invoice_service.delete_invoice(session, auth.company_id, invoice_id)
