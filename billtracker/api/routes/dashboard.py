"""Dashboard statistics endpoint."""

from fastapi import APIRouter

from billtracker.api.deps import Auth, Session
from billtracker.services.reporting import DashboardStats, dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(auth: Auth, session: Session) -> DashboardStats:
    """Income, amount due and recent payments, computed fresh on every call."""
    return await dashboard_stats(session, auth.company_id)
