"""Franchise and store endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from jwt_pizza_service.auth.deps import CurrentUserDep, OptionalUserDep
from jwt_pizza_service.auth.guard import Action, Allow, Resource, authorize, enforce
from jwt_pizza_service.db.deps import FranchisesRepoDep, SessionDep
from jwt_pizza_service.rest.schemas import (
    FranchiseAdminSchema,
    FranchiseCreate,
    FranchiseListResponse,
    FranchiseSchema,
    MessageResponse,
    StoreCreate,
    StoreSchema,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/franchise")


def _store_to_schema(store) -> StoreSchema:
    return StoreSchema(id=store.id, name=store.name, franchise_id=store.franchise_id)


def _franchise_to_schema(franchise, admins=None) -> FranchiseSchema:
    return FranchiseSchema(
        id=franchise.id,
        name=franchise.name,
        admins=(
            [FranchiseAdminSchema(id=u.id, name=u.name, email=u.email) for u in admins]
            if admins is not None
            else None
        ),
        stores=[_store_to_schema(s) for s in franchise.stores],
    )


@router.get("", response_model=FranchiseListResponse)
async def list_franchises(
    current_user: OptionalUserDep,
    repo: FranchisesRepoDep,
    page: int = 0,
    limit: int = 10,
    name: str = "*",
) -> FranchiseListResponse:
    """List franchises, filtered by name.

    Admins, and the franchisees of a given franchise, also see its admins.
    """
    franchises, more = await repo.list_franchises(page=page, limit=max(limit, 1), name=name)
    result = []
    for franchise in franchises:
        decision = authorize(
            current_user, Action.VIEW_FRANCHISE, Resource(franchise_id=franchise.id)
        )
        admins = await repo.list_admins(franchise.id) if isinstance(decision, Allow) else None
        result.append(_franchise_to_schema(franchise, admins))
    return FranchiseListResponse(franchises=result, more=more)


@router.get("/{user_id}", response_model=list[FranchiseSchema])
async def list_user_franchises(
    user_id: int, current_user: CurrentUserDep, repo: FranchisesRepoDep
) -> list[FranchiseSchema]:
    """List the franchises a user administers. Other users' lists are empty unless admin."""
    decision = authorize(current_user, Action.VIEW_USER_FRANCHISES, Resource(owner_id=user_id))
    if not isinstance(decision, Allow):
        return []
    return [
        _franchise_to_schema(f, await repo.list_admins(f.id))
        for f in await repo.list_franchises_for_user(user_id)
    ]


@router.post("", response_model=FranchiseSchema)
async def create_franchise(
    request: FranchiseCreate,
    current_user: CurrentUserDep,
    repo: FranchisesRepoDep,
    session: SessionDep,
) -> FranchiseSchema:
    """Create a franchise; every listed admin becomes its franchisee. Admin only."""
    enforce(authorize(current_user, Action.CREATE_FRANCHISE), "unable to create a franchise")
    franchise, admins = await repo.create_franchise(
        request.name, [a.email for a in request.admins]
    )
    await session.commit()
    log.info("franchise_created", franchise_id=franchise.id, admins=[u.id for u in admins])
    return _franchise_to_schema(franchise, admins)


@router.delete("/{franchise_id}", response_model=MessageResponse)
async def delete_franchise(
    franchise_id: int,
    current_user: CurrentUserDep,
    repo: FranchisesRepoDep,
    session: SessionDep,
) -> MessageResponse:
    """Delete a franchise and all of its stores. Admin only."""
    enforce(
        authorize(current_user, Action.DELETE_FRANCHISE, Resource(franchise_id=franchise_id)),
        "unable to delete a franchise",
    )
    await repo.delete_franchise(franchise_id)
    await session.commit()
    log.info("franchise_deleted", franchise_id=franchise_id)
    return MessageResponse(message="franchise deleted")


@router.post("/{franchise_id}/store", response_model=StoreSchema)
async def create_store(
    franchise_id: int,
    request: StoreCreate,
    current_user: CurrentUserDep,
    repo: FranchisesRepoDep,
    session: SessionDep,
) -> StoreSchema:
    """Create a store. Admin or an admin of the franchise."""
    enforce(
        authorize(current_user, Action.CREATE_STORE, Resource(franchise_id=franchise_id)),
        "unable to create a store",
    )
    store = await repo.create_store(franchise_id, request.name)
    await session.commit()
    log.info("store_created", franchise_id=franchise_id, store_id=store.id)
    return _store_to_schema(store)


@router.delete("/{franchise_id}/store/{store_id}", response_model=MessageResponse)
async def delete_store(
    franchise_id: int,
    store_id: int,
    current_user: CurrentUserDep,
    repo: FranchisesRepoDep,
    session: SessionDep,
) -> MessageResponse:
    """Delete a store. Admin or an admin of the franchise."""
    enforce(
        authorize(current_user, Action.DELETE_STORE, Resource(franchise_id=franchise_id)),
        "unable to delete a store",
    )
    await repo.delete_store(franchise_id, store_id)
    await session.commit()
    log.info("store_deleted", franchise_id=franchise_id, store_id=store_id)
    return MessageResponse(message="store deleted")
