"""API router aggregation."""

from fastapi import APIRouter

from billtracker.api.routes.admin import router as admin_router
from billtracker.api.routes.auth import router as auth_router
from billtracker.api.routes.clients import router as clients_router
from billtracker.api.routes.dashboard import router as dashboard_router
from billtracker.api.routes.invoices import router as invoices_router
from billtracker.api.routes.payments import router as payments_router
from billtracker.api.routes.settings import router as settings_router

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(clients_router)
api_router.include_router(invoices_router)
api_router.include_router(payments_router)
api_router.include_router(settings_router)
api_router.include_router(dashboard_router)
api_router.include_router(admin_router)
