"""Security utilities: password hashing and JWT helpers."""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from billtracker.core.config import get_settings

settings = get_settings()

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ── JWT ───────────────────────────────────────────────────────

TOKEN_KIND_USER = "user"
TOKEN_KIND_ADMIN = "admin"


def create_jwt(
    subject: str,
    kind: str,
    company_id: int | None = None,
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed token.

    Company staff tokens carry ``cid`` (the tenant scope) and ``role``;
    super-admin tokens carry neither.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    )
    payload: dict = {
        "sub": subject,
        "kind": kind,
        "exp": expire,
    }
    if company_id is not None:
        payload["cid"] = company_id
    if role is not None:
        payload["role"] = role
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jose.JWTError on failure."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
