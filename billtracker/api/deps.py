"""FastAPI dependencies for authentication and company scoping."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from billtracker.core.database import get_session
from billtracker.core.security import TOKEN_KIND_ADMIN, TOKEN_KIND_USER, decode_jwt
from billtracker.models.company import Company

bearer_scheme = HTTPBearer()


class AuthContext:
    """Resolved identity carried through a request."""

    __slots__ = ("user_id", "company_id", "role", "is_admin")

    def __init__(
        self,
        user_id: int,
        company_id: int | None,
        role: str | None,
        is_admin: bool = False,
    ) -> None:
        self.user_id = user_id
        self.company_id = company_id
        self.role = role
        self.is_admin = is_admin


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> AuthContext:
    """Decode the bearer JWT into an AuthContext."""
    try:
        payload = decode_jwt(credentials.credentials)
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from exc

    try:
        kind = payload["kind"]
        user_id = int(payload["sub"])
        if kind == TOKEN_KIND_ADMIN:
            return AuthContext(user_id=user_id, company_id=None, role=None, is_admin=True)
        if kind == TOKEN_KIND_USER:
            company_id = payload.get("cid")
            return AuthContext(
                user_id=user_id,
                company_id=int(company_id) if company_id is not None else None,
                role=payload.get("role", "user"),
            )
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed token payload",
        ) from exc

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Malformed token payload",
    )


async def require_company(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AuthContext:
    """Only identities bound to a live, active company may touch tenant data.

    The company row is re-checked on every request, so tokens issued before
    the company was deleted or deactivated stop working immediately.
    """
    if auth.company_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Company access required",
        )

    company = await session.get(Company, auth.company_id)
    if company is None or not company.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Company is no longer active",
        )
    return auth


async def require_admin(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> AuthContext:
    if not auth.is_admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin authentication required",
        )
    return auth


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(require_company)]
AdminAuth = Annotated[AuthContext, Depends(require_admin)]
Session = Annotated[AsyncSession, Depends(get_session)]
