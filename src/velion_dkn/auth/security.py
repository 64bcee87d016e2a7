"""Bearer-token gate.

Accounts and logins are owned by a separate auth service; this module only
verifies the JWT it issued and resolves the caller's user row.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Annotated, Any

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from velion_dkn.db.engine import DBEngine
from velion_dkn.exceptions import AuthenticationError
from velion_dkn.users.models import User

from .settings import AuthSettings

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: int
    name: str
    email: str
    role: str
    is_reviewer: bool

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_reviewer=bool(user.is_reviewer),
        )


def issue_token(user_id: int, settings: AuthSettings, *, lifetime_seconds: int | None = None) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    lifetime = lifetime_seconds if lifetime_seconds is not None else settings.jwt_lifetime_seconds
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + dt.timedelta(seconds=lifetime),
    }
    return jwt.encode(claims, settings.jwt_secret.get_secret_value(), algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: AuthSettings) -> int:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Not authorized, token expired") from exc
    except jwt.PyJWTError as exc:
        raise AuthenticationError("Not authorized, token failed") from exc
    try:
        return int(claims["sub"])
    except (TypeError, ValueError) as exc:
        raise AuthenticationError("Not authorized, token failed") from exc


async def load_principal(engine: DBEngine, user_id: int) -> Principal:
    async with engine.session() as session:
        user = await session.get(User, user_id)
    if user is None:
        raise AuthenticationError("Not authorized, user not found")
    return Principal.from_user(user)


async def current_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()
    settings: AuthSettings = request.app.state.auth_settings
    user_id = decode_token(credentials.credentials, settings)
    principal = await load_principal(request.app.state.db_engine, user_id)
    request.state.user_id = principal.id
    return principal


CurrentPrincipal = Annotated[Principal, Depends(current_principal)]
