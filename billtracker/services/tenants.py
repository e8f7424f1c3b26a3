"""Tenant directory: company provisioning and teardown for the super-admin.

These functions are not company-scoped; only routes guarded
by the super-admin dependency may call them.
"""

import logging

from pydantic import BaseModel
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from billtracker.core.config import get_settings
from billtracker.core.database import unit_of_work
from billtracker.core.errors import ConflictError, NotFoundError
from billtracker.core.security import hash_password
from billtracker.models.client import Client
from billtracker.models.company import Company, CompanyCreate, CompanyUpdate
from billtracker.models.company_settings import CompanySettings
from billtracker.models.invoice import Invoice, InvoiceItem
from billtracker.models.payment import Payment
from billtracker.models.user import AdminUser, User, UserRole
from billtracker.services.settings_store import build_default_settings

logger = logging.getLogger(__name__)


class DirectoryStats(BaseModel):
    total_companies: int
    active_companies: int
    total_users: int
    active_users: int


# ── Companies ────────────────────────────────────────────────

async def list_companies(session: AsyncSession) -> list[tuple[Company, int]]:
    """Every company with its staff head-count, newest first."""
    stmt = (
        select(Company, func.count(User.id))
        .outerjoin(User, User.company_id == Company.id)
        .group_by(Company.id)
        .order_by(Company.created_at.desc(), Company.id.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return [(company, count) for company, count in result.all()]


async def get_company_or_404(session: AsyncSession, company_id: int) -> Company:
    company = await session.get(Company, company_id)
    if company is None:
        raise NotFoundError("Company")
    return company


async def provision_company(session: AsyncSession, data: CompanyCreate) -> tuple[Company, User]:
    """Create a company, its first staff admin and its settings row together."""
    existing = await session.execute(
        select(User.id).where(User.email == data.admin_user.email)
    )
    if existing.first() is not None:
        raise ConflictError(f"A user with email '{data.admin_user.email}' already exists")

    async with unit_of_work(session):
        company = Company(
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
        )
        session.add(company)
        await session.flush()  # populate company.id

        user = User(
            company_id=company.id,
            email=data.admin_user.email,
            password_hash=hash_password(data.admin_user.password),
            first_name=data.admin_user.first_name,
            last_name=data.admin_user.last_name,
            role=UserRole.ADMIN,
        )
        session.add(user)
        session.add(build_default_settings(company.id, company))

    await session.refresh(company)
    await session.refresh(user)
    logger.info("Provisioned company %s (%s) with admin %s", company.id, company.name, user.email)
    return company, user


async def update_company(session: AsyncSession, company_id: int, data: CompanyUpdate) -> Company:
    company = await get_company_or_404(session, company_id)

    update_data = data.model_dump(exclude_unset=True)
    for field in ("name", "email", "is_active"):
        if update_data.get(field) is None:
            update_data.pop(field, None)
    for field, value in update_data.items():
        setattr(company, field, value)

    session.add(company)
    await session.commit()
    await session.refresh(company)
    return company


async def delete_company(session: AsyncSession, company_id: int) -> None:
    """Remove a company and everything it owns, children first, atomically."""
    company = await get_company_or_404(session, company_id)

    invoice_ids = select(Invoice.id).where(Invoice.company_id == company.id)
    async with unit_of_work(session):
        await session.execute(delete(InvoiceItem).where(InvoiceItem.invoice_id.in_(invoice_ids)))  # type: ignore[attr-defined]
        await session.execute(delete(Payment).where(Payment.invoice_id.in_(invoice_ids)))  # type: ignore[attr-defined]
        await session.execute(delete(Invoice).where(Invoice.company_id == company.id))
        await session.execute(delete(Client).where(Client.company_id == company.id))
        await session.execute(delete(User).where(User.company_id == company.id))
        await session.execute(
            delete(CompanySettings).where(CompanySettings.company_id == company.id)
        )
        await session.delete(company)

    logger.info("Deleted company %s and all of its data", company_id)


async def list_company_users(session: AsyncSession, company_id: int) -> list[User]:
    await get_company_or_404(session, company_id)
    stmt = (
        select(User)
        .where(User.company_id == company_id)
        .order_by(User.created_at.desc(), User.id.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def directory_stats(session: AsyncSession) -> DirectoryStats:
    async def count(stmt) -> int:
        return (await session.execute(stmt)).scalar_one()

    return DirectoryStats(
        total_companies=await count(select(func.count()).select_from(Company)),
        active_companies=await count(
            select(func.count()).select_from(Company).where(Company.is_active.is_(True))  # type: ignore[union-attr]
        ),
        total_users=await count(select(func.count()).select_from(User)),
        active_users=await count(
            select(func.count()).select_from(User).where(User.is_active.is_(True))  # type: ignore[union-attr]
        ),
    )


# ── Super-admins ─────────────────────────────────────────────

async def create_admin_user(
    session: AsyncSession,
    email: str,
    password: str,
    first_name: str = "Admin",
    last_name: str = "User",
) -> AdminUser:
    admin = AdminUser(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    return admin


async def ensure_default_admin(session: AsyncSession) -> AdminUser | None:
    """Seed the configured super-admin when the admin table is empty."""
    existing = await session.execute(select(AdminUser.id).limit(1))
    if existing.first() is not None:
        return None

    settings = get_settings()
    if not settings.bootstrap_admin_password:
        logger.warning(
            "No super-admin exists and BOOTSTRAP_ADMIN_PASSWORD is not set; skipping"
        )
        return None

    admin = await create_admin_user(
        session, settings.bootstrap_admin_email, settings.bootstrap_admin_password
    )
    logger.info("Default super-admin created: %s", admin.email)
    return admin
