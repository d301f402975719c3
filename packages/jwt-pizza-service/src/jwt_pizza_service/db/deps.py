"""FastAPI dependency injection for database sessions and repositories."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jwt_pizza_service.db.repositories.franchises import FranchisesRepo
from jwt_pizza_service.db.repositories.orders import OrdersRepo
from jwt_pizza_service.db.repositories.sessions import SessionsRepo
from jwt_pizza_service.db.repositories.users import UsersRepo


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a session from the app's factory; uncommitted work is rolled back on exit."""
    factory = request.app.state.session_factory
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_users_repo(session: SessionDep) -> UsersRepo:
    return UsersRepo(session)


def get_sessions_repo(session: SessionDep) -> SessionsRepo:
    return SessionsRepo(session)


def get_franchises_repo(session: SessionDep) -> FranchisesRepo:
    return FranchisesRepo(session)


def get_orders_repo(session: SessionDep) -> OrdersRepo:
    return OrdersRepo(session)


UsersRepoDep = Annotated[UsersRepo, Depends(get_users_repo)]
SessionsRepoDep = Annotated[SessionsRepo, Depends(get_sessions_repo)]
FranchisesRepoDep = Annotated[FranchisesRepo, Depends(get_franchises_repo)]
OrdersRepoDep = Annotated[OrdersRepo, Depends(get_orders_repo)]
