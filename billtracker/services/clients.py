"""Client registry: every query is scoped to one company."""

import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from billtracker.core.errors import ConflictError, NotFoundError
from billtracker.models.client import Client, ClientCreate, ClientUpdate
from billtracker.models.invoice import Invoice

logger = logging.getLogger(__name__)


async def list_clients(session: AsyncSession, company_id: int) -> list[Client]:
    stmt = (
        select(Client)
        .where(Client.company_id == company_id)
        .order_by(Client.name.asc(), Client.id.asc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_client(session: AsyncSession, company_id: int, client_id: int) -> Client:
    stmt = select(Client).where(
        Client.id == client_id,
        Client.company_id == company_id,
    )
    result = await session.execute(stmt)
    client = result.scalar_one_or_none()
    if client is None:
        raise NotFoundError("Client")
    return client


async def create_client(session: AsyncSession, company_id: int, data: ClientCreate) -> Client:
    client = Client(company_id=company_id, **data.model_dump())
    session.add(client)
    await session.commit()
    await session.refresh(client)
    return client


async def update_client(
    session: AsyncSession, company_id: int, client_id: int, data: ClientUpdate
) -> Client:
    client = await get_client(session, company_id, client_id)

    update_data = data.model_dump(exclude_unset=True)
    # name and email are NOT NULL; an explicit null leaves them unchanged
    for field in ("name", "email"):
        if update_data.get(field) is None:
            update_data.pop(field, None)
    for field, value in update_data.items():
        setattr(client, field, value)

    session.add(client)
    await session.commit()
    await session.refresh(client)
    return client


async def delete_client(session: AsyncSession, company_id: int, client_id: int) -> None:
    """Delete a client that no invoice references."""
    client = await get_client(session, company_id, client_id)

    invoice_count = (await session.execute(
        select(func.count()).select_from(Invoice).where(Invoice.client_id == client.id)
    )).scalar_one()
    if invoice_count:
        raise ConflictError(
            f"Client has {invoice_count} invoice(s); delete those invoices first"
        )

    await session.delete(client)
    await session.commit()
    logger.info("Deleted client %s of company %s", client_id, company_id)
