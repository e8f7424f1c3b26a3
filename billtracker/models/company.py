"""Company model: the tenant boundary. Every other row hangs off a company."""

from datetime import datetime

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from billtracker.models.base import CreatedAtMixin
from billtracker.models.user import UserCreate


class Company(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "companies"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    email: str = Field(max_length=320, nullable=False)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None)
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class CompanyCreate(SQLModel):
    """Provision a company together with its first staff admin."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    admin_user: UserCreate


class CompanyUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    is_active: bool | None = None


class CompanyRead(SQLModel):
    id: int
    name: str
    email: str
    phone: str | None
    address: str | None
    is_active: bool
    created_at: datetime


class CompanyWithUserCount(CompanyRead):
    user_count: int
