"""Per-company settings with create-on-first-read defaults."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from billtracker.core.config import get_settings
from billtracker.core.database import unit_of_work
from billtracker.models.base import money
from billtracker.models.company import Company
from billtracker.models.company_settings import CompanySettings, CompanySettingsUpdate

logger = logging.getLogger(__name__)

_NOT_NULL = ("company_name", "email", "currency", "default_tax_rate")


def build_default_settings(company_id: int, company: Company | None = None) -> CompanySettings:
    """A settings row seeded from the company's own contact details."""
    config = get_settings()
    return CompanySettings(
        company_id=company_id,
        company_name=company.name if company else config.default_company_name,
        email=company.email if company else config.default_company_email,
        phone=company.phone if company else None,
        address=company.address if company else None,
        currency=config.default_currency,
        default_tax_rate=money(config.default_tax_rate),
    )


async def _find(session: AsyncSession, company_id: int) -> CompanySettings | None:
    result = await session.execute(
        select(CompanySettings).where(CompanySettings.company_id == company_id)
    )
    return result.scalar_one_or_none()


async def get_company_settings(session: AsyncSession, company_id: int) -> CompanySettings:
    """Return the company's settings row, creating the default one if absent.

    Safe to call concurrently: the loser of an insert race hits the unique
    constraint on ``company_id`` and re-reads the winner's row.
    """
    existing = await _find(session, company_id)
    if existing is not None:
        return existing

    company = await session.get(Company, company_id)
    try:
        async with unit_of_work(session):
            row = build_default_settings(company_id, company)
            session.add(row)
    except IntegrityError:
        winner = await _find(session, company_id)
        if winner is None:
            raise
        return winner

    logger.info("Created default settings for company %s", company_id)
    await session.refresh(row)
    return row


async def update_company_settings(
    session: AsyncSession, company_id: int, data: CompanySettingsUpdate
) -> CompanySettings:
    row = await get_company_settings(session, company_id)

    update_data = data.model_dump(exclude_unset=True)
    for field in _NOT_NULL:
        if update_data.get(field) is None:
            update_data.pop(field, None)
    if "default_tax_rate" in update_data:
        update_data["default_tax_rate"] = money(update_data["default_tax_rate"])
    if "currency" in update_data:
        update_data["currency"] = update_data["currency"].upper()
    for field, value in update_data.items():
        setattr(row, field, value)

    session.add(row)
    await session.commit()
    await session.refresh(row)
    return row
