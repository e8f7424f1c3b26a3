"""Client model: a customer of one company."""

from pydantic import EmailStr
from sqlmodel import Field, SQLModel


class Client(SQLModel, table=True):
    __tablename__ = "clients"

    id: int | None = Field(default=None, primary_key=True)
    company_id: int = Field(foreign_key="companies.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    email: str = Field(max_length=320, nullable=False)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class ClientCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None


class ClientUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None


class ClientRead(SQLModel):
    id: int
    company_id: int
    name: str
    email: str
    phone: str | None
    address: str | None
