"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jwt_pizza_service import __version__
from jwt_pizza_service.auth.models import Role
from jwt_pizza_service.db.engine import close_db, create_engine, create_session_factory, init_db
from jwt_pizza_service.db.repositories.users import UsersRepo
from jwt_pizza_service.errors import register_exception_handlers
from jwt_pizza_service.factory import FactoryClient
from jwt_pizza_service.rest.routes.auth import router as auth_router
from jwt_pizza_service.rest.routes.franchises import router as franchises_router
from jwt_pizza_service.rest.routes.info import router as info_router
from jwt_pizza_service.rest.routes.orders import router as orders_router
from jwt_pizza_service.rest.routes.users import router as users_router
from jwt_pizza_service.settings import Settings
from jwt_pizza_service.settings import settings as default_settings

log = structlog.get_logger(__name__)


async def bootstrap_admin(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    """Create the configured admin account if it does not exist yet."""
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        return
    async with session_factory() as session:
        repo = UsersRepo(session)
        if await repo.get_user_by_email(settings.bootstrap_admin_email):
            return
        await repo.create_user(
            name=settings.bootstrap_admin_name,
            email=settings.bootstrap_admin_email,
            password=settings.bootstrap_admin_password,
            roles=[(Role.ADMIN, None)],
        )
        await session.commit()
    log.info("admin_bootstrapped", email=settings.bootstrap_admin_email)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    await init_db(engine)
    await bootstrap_admin(app.state.session_factory, settings)
    yield
    await close_db(engine)


def create_app(
    settings: Settings | None = None, factory_client: FactoryClient | None = None
) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(
        title="JWT Pizza API",
        description="Pizza ordering service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.factory_client = factory_client or FactoryClient(
        settings.factory_url,
        api_key=settings.factory_api_key,
        timeout=settings.factory_timeout_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Public routes
    app.include_router(info_router, tags=["info"])

    # Auth routes (register/login are public; logout needs a token)
    app.include_router(auth_router, prefix="/api", tags=["auth"])

    # Per-route authorization happens inside the handlers
    app.include_router(users_router, prefix="/api", tags=["user"])
    app.include_router(orders_router, prefix="/api", tags=["order"])
    app.include_router(franchises_router, prefix="/api", tags=["franchise"])

    return app
