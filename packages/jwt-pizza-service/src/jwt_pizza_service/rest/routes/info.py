"""Service info endpoints: welcome banner and generated API docs."""

from fastapi import APIRouter, Request
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute
from sqlalchemy.engine import make_url

from jwt_pizza_service import __version__
from jwt_pizza_service.auth.deps import get_current_user
from jwt_pizza_service.rest.schemas import DocsResponse, EndpointDoc, WelcomeResponse

router = APIRouter()


def _requires_auth(dependant: Dependant) -> bool:
    return any(
        dep.call is get_current_user or _requires_auth(dep) for dep in dependant.dependencies
    )


@router.get("/", response_model=WelcomeResponse)
async def welcome() -> WelcomeResponse:
    return WelcomeResponse(message="welcome to JWT Pizza", version=__version__)


@router.get("/api/docs", response_model=DocsResponse)
async def docs(request: Request) -> DocsResponse:
    settings = request.app.state.settings
    endpoints = [
        EndpointDoc(
            method=method,
            path=route.path,
            requires_auth=_requires_auth(route.dependant),
            description=route.description or "",
        )
        for route in request.app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api/") and route.path != "/api/docs"
        for method in sorted(route.methods)
    ]
    return DocsResponse(
        version=__version__,
        endpoints=endpoints,
        config={
            "factory": settings.factory_url,
            "db": make_url(settings.database_url).get_backend_name(),
        },
    )
