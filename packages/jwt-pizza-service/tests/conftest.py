"""Service test fixtures: a fresh in-memory database per test and a stub factory."""

from __future__ import annotations

import sys
from pathlib import Path
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Make _helpers importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from jwt_pizza_service.errors import FactoryFulfillmentFailed  # noqa: E402
from jwt_pizza_service.factory import FulfillmentResult  # noqa: E402
from jwt_pizza_service.rest.app import create_app  # noqa: E402
from jwt_pizza_service.rest.routes.orders import get_factory_client  # noqa: E402
from jwt_pizza_service.settings import Settings  # noqa: E402


class StubFactory:
    """Factory double: accepts every order unless ``fail`` is set.

    ``during`` is awaited while the order is "at the factory".
    """

    def __init__(self) -> None:
        self.fail = False
        self.during: Callable[[], Awaitable[None]] | None = None
        self.calls: list[tuple[dict[str, Any], dict[str, Any]]] = []

    async def fulfill(self, diner: dict[str, Any], order: dict[str, Any]) -> FulfillmentResult:
        self.calls.append((diner, order))
        if self.during is not None:
            await self.during()
        if self.fail:
            raise FactoryFulfillmentFailed(
                report_url="http://factory-report.com/fail", reason="Factory error"
            )
        return FulfillmentResult(jwt="mock-factory-jwt", report_url="http://factory-report.com")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret="test-secret",
        factory_url="http://factory.test",
        bootstrap_admin_email=None,
        bootstrap_admin_password=None,
    )


@pytest.fixture
def factory() -> StubFactory:
    return StubFactory()


@pytest.fixture
def app(test_settings, factory):
    app = create_app(test_settings)
    app.dependency_overrides[get_factory_client] = lambda: factory
    return app


@pytest.fixture
def client(app):
    """TestClient with the lifespan running, so tables exist and ``portal`` is open."""
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def file_client(test_settings, factory, tmp_path):
    """Client over an on-disk SQLite database, where connections really contend for locks."""
    settings = test_settings.model_copy(
        update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'pizza.db'}"}
    )
    app = create_app(settings)
    app.dependency_overrides[get_factory_client] = lambda: factory
    with TestClient(app) as tc:
        yield tc
