"""Per-company billing settings: exactly one row per company."""

from decimal import Decimal

from pydantic import EmailStr
from sqlmodel import Field, SQLModel


class CompanySettings(SQLModel, table=True):
    __tablename__ = "settings"

    id: int | None = Field(default=None, primary_key=True)
    # Unique so two concurrent first reads cannot both insert a default row
    company_id: int = Field(foreign_key="companies.id", nullable=False, unique=True, index=True)

    company_name: str = Field(max_length=255, nullable=False)
    email: str = Field(max_length=320, nullable=False)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None)
    currency: str = Field(default="INR", max_length=3)
    default_tax_rate: Decimal = Field(default=Decimal("18.00"), max_digits=5, decimal_places=2)
    logo_url: str | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class CompanySettingsUpdate(SQLModel):
    company_name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    default_tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    logo_url: str | None = None


class CompanySettingsRead(SQLModel):
    id: int
    company_id: int
    company_name: str
    email: str
    phone: str | None
    address: str | None
    currency: str
    default_tax_rate: Decimal
    logo_url: str | None
