"""Company settings endpoints."""

from fastapi import APIRouter, HTTPException, status

from billtracker.api.deps import Auth, Session
from billtracker.models.company_settings import CompanySettingsRead, CompanySettingsUpdate
from billtracker.models.user import UserRole
from billtracker.services import settings_store

router = APIRouter(prefix="/settings", tags=["settings"])


def _require_company_admin(role: str | None) -> None:
    """Raise 403 unless the caller is an admin of their company."""
    if role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only company admins can change settings",
        )


@router.get("", response_model=CompanySettingsRead)
async def get_settings(auth: Auth, session: Session) -> CompanySettingsRead:
    row = await settings_store.get_company_settings(session, auth.company_id)
    return CompanySettingsRead.model_validate(row)


@router.put("", response_model=CompanySettingsRead)
async def update_settings(
    body: CompanySettingsUpdate,
    auth: Auth,
    session: Session,
) -> CompanySettingsRead:
    _require_company_admin(auth.role)
    row = await settings_store.update_company_settings(session, auth.company_id, body)
    return CompanySettingsRead.model_validate(row)
