"""Client CRUD: all queries scoped to the caller's company."""

from fastapi import APIRouter, status

from billtracker.api.deps import Auth, Session
from billtracker.models.client import ClientCreate, ClientRead, ClientUpdate
from billtracker.services import clients as client_service

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=list[ClientRead])
async def list_clients(auth: Auth, session: Session) -> list[ClientRead]:
    rows = await client_service.list_clients(session, auth.company_id)
    return [ClientRead.model_validate(c) for c in rows]


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(client_id: int, auth: Auth, session: Session) -> ClientRead:
    client = await client_service.get_client(session, auth.company_id, client_id)
    return ClientRead.model_validate(client)


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(body: ClientCreate, auth: Auth, session: Session) -> ClientRead:
    client = await client_service.create_client(session, auth.company_id, body)
    return ClientRead.model_validate(client)


@router.put("/{client_id}", response_model=ClientRead)
async def update_client(
    client_id: int,
    body: ClientUpdate,
    auth: Auth,
    session: Session,
) -> ClientRead:
    client = await client_service.update_client(session, auth.company_id, client_id, body)
    return ClientRead.model_validate(client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int, auth: Auth, session: Session) -> None:
    """Refused with 409 while invoices still reference the client."""
    await client_service.delete_client(session, auth.company_id, client_id)
