"""Super-admin console: tenant directory, exempt from company scoping."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlmodel import select

from billtracker.api.deps import AdminAuth, Session
from billtracker.core.security import TOKEN_KIND_ADMIN, create_jwt, verify_password
from billtracker.models.company import (
    CompanyCreate,
    CompanyRead,
    CompanyUpdate,
    CompanyWithUserCount,
)
from billtracker.models.user import AdminUser, AdminUserRead, UserRead
from billtracker.services import tenants
from billtracker.services.reporting import BillingStats, billing_stats

router = APIRouter(prefix="/admin", tags=["admin"])


# ── Schemas ──────────────────────────────────────────────────

class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str


class AdminLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminUserRead


class CompanyProvisioned(BaseModel):
    company: CompanyRead
    admin_user: UserRead


# ── Auth ─────────────────────────────────────────────────────

@router.post("/login", response_model=AdminLoginResponse)
async def admin_login(body: AdminLoginRequest, session: Session) -> AdminLoginResponse:
    result = await session.execute(select(AdminUser).where(AdminUser.email == body.email))
    admin = result.scalar_one_or_none()

    if admin is None or not verify_password(body.password, admin.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    return AdminLoginResponse(
        access_token=create_jwt(subject=str(admin.id), kind=TOKEN_KIND_ADMIN),
        admin=AdminUserRead.model_validate(admin),
    )


@router.get("/me", response_model=AdminUserRead)
async def admin_me(auth: AdminAuth, session: Session) -> AdminUserRead:
    admin = await session.get(AdminUser, auth.user_id)
    if admin is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
    return AdminUserRead.model_validate(admin)


# ── Companies ────────────────────────────────────────────────

@router.get("/companies", response_model=list[CompanyWithUserCount])
async def list_companies(auth: AdminAuth, session: Session) -> list[CompanyWithUserCount]:
    rows = await tenants.list_companies(session)
    return [
        CompanyWithUserCount(
            **CompanyRead.model_validate(company).model_dump(),
            user_count=user_count,
        )
        for company, user_count in rows
    ]


@router.post(
    "/companies",
    response_model=CompanyProvisioned,
    status_code=status.HTTP_201_CREATED,
)
async def create_company(
    body: CompanyCreate,
    auth: AdminAuth,
    session: Session,
) -> CompanyProvisioned:
    """Provision a company, its first staff admin and its default settings."""
    company, user = await tenants.provision_company(session, body)
    return CompanyProvisioned(
        company=CompanyRead.model_validate(company),
        admin_user=UserRead.model_validate(user),
    )


@router.put("/companies/{company_id}", response_model=CompanyRead)
async def update_company(
    company_id: int,
    body: CompanyUpdate,
    auth: AdminAuth,
    session: Session,
) -> CompanyRead:
    company = await tenants.update_company(session, company_id, body)
    return CompanyRead.model_validate(company)


@router.delete("/companies/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(company_id: int, auth: AdminAuth, session: Session) -> None:
    """Delete the company along with every row it owns."""
    await tenants.delete_company(session, company_id)


@router.get("/companies/{company_id}/users", response_model=list[UserRead])
async def list_company_users(
    company_id: int,
    auth: AdminAuth,
    session: Session,
) -> list[UserRead]:
    users = await tenants.list_company_users(session, company_id)
    return [UserRead.model_validate(u) for u in users]


# ── Stats ────────────────────────────────────────────────────

@router.get("/stats", response_model=tenants.DirectoryStats)
async def get_directory_stats(auth: AdminAuth, session: Session) -> tenants.DirectoryStats:
    return await tenants.directory_stats(session)


@router.get("/billing/stats", response_model=BillingStats)
async def get_billing_stats(auth: AdminAuth, session: Session) -> BillingStats:
    return await billing_stats(session)
