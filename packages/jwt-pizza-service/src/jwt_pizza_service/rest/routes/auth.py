"""Auth endpoints: register, login, logout."""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from jwt_pizza_service.auth.deps import CurrentUserDep, TokenServiceDep
from jwt_pizza_service.auth.guard import Action, authorize, enforce
from jwt_pizza_service.auth.passwords import verify_password
from jwt_pizza_service.db.deps import SessionDep, UsersRepoDep
from jwt_pizza_service.errors import NotFound
from jwt_pizza_service.rest.routes.users import user_to_schema
from jwt_pizza_service.rest.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth")


@router.post("", response_model=AuthResponse)
async def register(
    request: RegisterRequest, repo: UsersRepoDep, tokens: TokenServiceDep, session: SessionDep
) -> AuthResponse:
    """Register a new diner and log them in."""
    user = await repo.create_user(name=request.name, email=request.email, password=request.password)
    token = await tokens.issue(user)
    await session.commit()
    log.info("user_registered", user_id=user.id)
    return AuthResponse(user=user_to_schema(user), token=token)


@router.put("", response_model=AuthResponse)
async def login(
    request: LoginRequest, repo: UsersRepoDep, tokens: TokenServiceDep, session: SessionDep
) -> AuthResponse:
    """Log in an existing user."""
    user = await repo.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        raise NotFound("unknown user")
    token = await tokens.issue(user)
    await session.commit()
    return AuthResponse(user=user_to_schema(user), token=token)


@router.delete("", response_model=MessageResponse)
async def logout(
    current_user: CurrentUserDep, tokens: TokenServiceDep, session: SessionDep
) -> MessageResponse:
    """Log out the token used for this request."""
    enforce(authorize(current_user, Action.LOGOUT))
    await tokens.revoke(current_user.token)
    await session.commit()
    return MessageResponse(message="logout successful")
