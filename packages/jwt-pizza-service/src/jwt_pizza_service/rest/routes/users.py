"""User endpoints: profile, update, admin listing and deletion."""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from jwt_pizza_service.auth.deps import CurrentUserDep, TokenServiceDep
from jwt_pizza_service.auth.guard import Action, Resource, authorize, enforce
from jwt_pizza_service.auth.models import CurrentUser
from jwt_pizza_service.db.deps import SessionDep, UsersRepoDep
from jwt_pizza_service.rest.schemas import (
    AuthResponse,
    MessageResponse,
    RoleSchema,
    UpdateUserRequest,
    UserListResponse,
    UserSchema,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/user")


def user_to_schema(user) -> UserSchema:
    """Convert a UserModel or CurrentUser to the REST UserSchema (never the hash)."""
    if isinstance(user, CurrentUser):
        roles = [RoleSchema(role=r.role.value, franchise_id=r.franchise_id) for r in user.roles]
    else:
        roles = [RoleSchema(role=r.role, franchise_id=r.franchise_id) for r in user.roles]
    return UserSchema(id=user.id, name=user.name, email=user.email, roles=roles)


@router.get("/me", response_model=UserSchema)
async def get_me(current_user: CurrentUserDep) -> UserSchema:
    """Get the authenticated user."""
    enforce(authorize(current_user, Action.VIEW_PROFILE, Resource(owner_id=current_user.id)))
    return user_to_schema(current_user)


@router.get("", response_model=UserListResponse)
async def list_users(
    current_user: CurrentUserDep,
    repo: UsersRepoDep,
    page: int = 0,
    limit: int = 10,
    name: str = "*",
) -> UserListResponse:
    """List users, filtered by name. Admin only."""
    enforce(authorize(current_user, Action.LIST_USERS))
    users, more = await repo.list_users(page=page, limit=max(limit, 1), name=name)
    return UserListResponse(users=[user_to_schema(u) for u in users], more=more)


@router.put("/{user_id}", response_model=AuthResponse)
async def update_user(
    user_id: int,
    request: UpdateUserRequest,
    current_user: CurrentUserDep,
    repo: UsersRepoDep,
    tokens: TokenServiceDep,
    session: SessionDep,
) -> AuthResponse:
    """Update a user's name, email or password. Self or admin."""
    enforce(authorize(current_user, Action.UPDATE_PROFILE, Resource(owner_id=user_id)))
    user = await repo.update_user(
        user_id, name=request.name, email=request.email, password=request.password
    )
    token = await tokens.issue(user)
    await session.commit()
    return AuthResponse(user=user_to_schema(user), token=token)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    current_user: CurrentUserDep,
    repo: UsersRepoDep,
    tokens: TokenServiceDep,
    session: SessionDep,
) -> MessageResponse:
    """Delete a user and revoke all of its tokens. Admin only."""
    enforce(authorize(current_user, Action.DELETE_USER, Resource(owner_id=user_id)))
    await tokens.revoke_all_for(user_id)
    await repo.delete_user(user_id)
    await session.commit()
    log.info("user_deleted", user_id=user_id, by=current_user.id)
    return MessageResponse(message=f"User {user_id} deleted")
