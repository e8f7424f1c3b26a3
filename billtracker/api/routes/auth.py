"""Company staff authentication: login + current user."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlmodel import select

from billtracker.api.deps import Auth, Session
from billtracker.core.security import TOKEN_KIND_USER, create_jwt, verify_password
from billtracker.models.company import Company, CompanyRead
from billtracker.models.user import User, UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
    company: CompanyRead


class MeResponse(BaseModel):
    user: UserRead
    company: CompanyRead


# ── Routes ───────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, session: Session) -> LoginResponse:
    """Authenticate with email + password, receive a company-scoped JWT."""
    stmt = select(User).where(User.email == body.email)
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    company = await session.get(Company, user.company_id)
    if company is None or not company.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Company is disabled",
        )

    token = create_jwt(
        subject=str(user.id),
        kind=TOKEN_KIND_USER,
        company_id=user.company_id,
        role=user.role,
    )

    return LoginResponse(
        access_token=token,
        user=UserRead.model_validate(user),
        company=CompanyRead.model_validate(company),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(auth: Auth, session: Session) -> MeResponse:
    """Return the current user and their company."""
    user = await session.get(User, auth.user_id)
    if user is None or user.company_id != auth.company_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    company = await session.get(Company, auth.company_id)
    if company is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")

    return MeResponse(
        user=UserRead.model_validate(user),
        company=CompanyRead.model_validate(company),
    )
