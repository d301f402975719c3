"""FastAPI auth dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from jwt_pizza_service.auth.models import CurrentUser
from jwt_pizza_service.auth.tokens import TokenService
from jwt_pizza_service.db.deps import SessionsRepoDep, UsersRepoDep
from jwt_pizza_service.errors import Unauthenticated


def get_token_service(
    request: Request, users: UsersRepoDep, sessions: SessionsRepoDep
) -> TokenService:
    settings = request.app.state.settings
    return TokenService(
        users,
        sessions,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.token_expire_minutes,
    )


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header.removeprefix("Bearer ").strip() or None


async def get_current_user(request: Request, tokens: TokenServiceDep) -> CurrentUser:
    """Resolve the caller from ``Authorization: Bearer <token>``; 401 otherwise."""
    token = _bearer_token(request)
    if token is None:
        raise Unauthenticated()
    return await tokens.verify(token)


async def get_optional_user(request: Request, tokens: TokenServiceDep) -> CurrentUser | None:
    """Like get_current_user, but a missing or bad token just means anonymous."""
    token = _bearer_token(request)
    if token is None:
        return None
    try:
        return await tokens.verify(token)
    except Unauthenticated:
        return None


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
OptionalUserDep = Annotated[CurrentUser | None, Depends(get_optional_user)]
