import logging
from datetime import datetime, timedelta, timezone
from dataclasses import dataclass

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gumboard.config import settings
from gumboard.database import get_db
from gumboard.errors import NoOrganization, Unauthenticated
from models.organization import OrganizationMember
from models.user import User


def _split_header_names(raw_value: str, fallback: list[str]) -> list[str]:
    names = [item.strip().lower() for item in (raw_value or "").split(",") if item.strip()]
    return names or fallback


TOKEN_HEADER_NAMES = _split_header_names(
    settings.AUTH_TOKEN_HEADERS,
    ["authorization", "x-auth-token"],
)
JWT_SECRET = settings.AUTH_JWT_SECRET
JWT_ALGORITHM = settings.AUTH_JWT_ALGORITHM or "HS256"
logger = logging.getLogger("gumboard.security")


@dataclass(frozen=True)
class SessionUser:
    user_id: str
    email: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class Actor:
    user_id: str
    organization_id: str
    is_admin: bool
    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown User"


def _mask_user_id(user_id: str | None) -> str:
    value = (user_id or "").strip()
    if not value:
        return "-"
    if len(value) <= 8:
        return value
    return f"{value[:4]}...{value[-4:]}"


def audit_auth_failure(request: Request | None, reason: str, *, user_id: str | None = None) -> None:
    if not request:
        logger.warning("AUTH_DENY reason=%s", reason)
        return
    path = getattr(getattr(request, "url", None), "path", "-")
    method = getattr(request, "method", "-")
    client = getattr(request, "client", None)
    ip = getattr(client, "host", "-") if client else "-"
    logger.warning(
        "AUTH_DENY reason=%s method=%s path=%s ip=%s user=%s",
        reason,
        method,
        path,
        ip,
        _mask_user_id(user_id),
    )


def extract_auth_token(request: Request) -> str | None:
    if not request:
        return None
    headers = getattr(request, "headers", None)
    token = None
    if headers:
        for name in TOKEN_HEADER_NAMES:
            value = headers.get(name)
            if not value:
                continue
            raw = value.strip()
            if not raw:
                continue
            if name == "authorization":
                if raw.lower().startswith("bearer "):
                    raw = raw.split(" ", 1)[1].strip()
                elif " " in raw:
                    # only the Bearer scheme is accepted
                    continue
            token = raw
            if token:
                break
    if not token:
        query = getattr(request, "query_params", None)
        if query:
            token = query.get("token") or query.get("access_token")
            if token:
                token = token.strip()
    return token or None


class SessionResolver:
    """Turns a request's session token into the signed-in user's claims."""

    def __init__(self, secret: str = JWT_SECRET, algorithm: str = JWT_ALGORITHM):
        self.secret = secret
        self.algorithm = algorithm

    def resolve(self, request: Request) -> SessionUser | None:
        token = extract_auth_token(request)
        if not token:
            audit_auth_failure(request, "missing_token")
            return None
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            audit_auth_failure(request, "expired_token")
            return None
        except JWTError:
            audit_auth_failure(request, "invalid_token")
            return None
        subject = payload.get("sub")
        if not subject:
            audit_auth_failure(request, "token_missing_sub")
            return None
        return SessionUser(user_id=str(subject), email=payload.get("email"), name=payload.get("name"))


session_resolver = SessionResolver()


def get_session_resolver() -> SessionResolver:
    return session_resolver


async def get_current_actor(
    request: Request,
    db: AsyncSession = Depends(get_db),
    resolver: SessionResolver = Depends(get_session_resolver),
) -> Actor:
    session = resolver.resolve(request)
    if not session:
        raise Unauthenticated()
    user = (await db.execute(select(User).where(User.id == session.user_id))).scalar_one_or_none()
    if not user:
        audit_auth_failure(request, "unknown_user", user_id=session.user_id)
        raise Unauthenticated()
    if not user.organization_id:
        audit_auth_failure(request, "no_organization", user_id=user.id)
        raise NoOrganization()
    membership = (await db.execute(
        select(OrganizationMember).where(
            OrganizationMember.organization_id == user.organization_id,
            OrganizationMember.user_id == user.id,
        )
    )).scalar_one_or_none()
    is_admin = bool(user.is_admin) or bool(membership and membership.role == OrganizationMember.ROLE_ADMIN)
    return Actor(
        user_id=user.id,
        organization_id=user.organization_id,
        is_admin=is_admin,
        name=user.name,
        email=user.email,
    )


def create_session_token(user_id: str, *, email: str | None = None, name: str | None = None, expires_in: int = 3600) -> str:
    """Mint a session token the way the sign-in service does. Used by scripts and tests."""
    claims = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    if email:
        claims["email"] = email
    if name:
        claims["name"] = name
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


async def get_optional_actor(
    request: Request,
    db: AsyncSession = Depends(get_db),
    resolver: SessionResolver = Depends(get_session_resolver),
) -> Actor | None:
    """Like ``get_current_actor`` but anonymous requests resolve to None."""
    if not extract_auth_token(request):
        return None
    return await get_current_actor(request, db, resolver)
