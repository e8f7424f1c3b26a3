"""Import all models so SQLModel.metadata picks them up."""

from billtracker.models.client import Client, ClientCreate, ClientRead, ClientUpdate
from billtracker.models.company import Company, CompanyRead, CompanyUpdate
from billtracker.models.company_settings import (
    CompanySettings,
    CompanySettingsRead,
    CompanySettingsUpdate,
)
from billtracker.models.invoice import (
    Invoice,
    InvoiceCreate,
    InvoiceCreateRequest,
    InvoiceDetail,
    InvoiceItem,
    InvoiceItemCreate,
    InvoiceItemRead,
    InvoiceRead,
    InvoiceStatus,
    InvoiceUpdate,
    InvoiceWithClient,
)
from billtracker.models.payment import Payment, PaymentCreate, PaymentRead
from billtracker.models.user import AdminUser, AdminUserRead, User, UserCreate, UserRead, UserRole

__all__ = [
    "AdminUser",
    "AdminUserRead",
    "Client",
    "ClientCreate",
    "ClientRead",
    "ClientUpdate",
    "Company",
    "CompanyRead",
    "CompanySettings",
    "CompanySettingsRead",
    "CompanySettingsUpdate",
    "CompanyUpdate",
    "Invoice",
    "InvoiceCreate",
    "InvoiceCreateRequest",
    "InvoiceDetail",
    "InvoiceItem",
    "InvoiceItemCreate",
    "InvoiceItemRead",
    "InvoiceRead",
    "InvoiceStatus",
    "InvoiceUpdate",
    "InvoiceWithClient",
    "Payment",
    "PaymentCreate",
    "PaymentRead",
    "User",
    "UserCreate",
    "UserRead",
    "UserRole",
]
