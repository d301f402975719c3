"""Menu and order endpoints."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request

from jwt_pizza_service.auth.deps import CurrentUserDep
from jwt_pizza_service.auth.guard import Action, Resource, authorize, enforce
from jwt_pizza_service.db.deps import OrdersRepoDep, SessionDep
from jwt_pizza_service.db.repositories.orders import LineItem
from jwt_pizza_service.errors import FactoryFulfillmentFailed
from jwt_pizza_service.factory import FactoryClient
from jwt_pizza_service.rest.schemas import (
    MenuItemCreate,
    MenuItemSchema,
    OrderCreate,
    OrderCreatedResponse,
    OrderHistorySchema,
    OrderItemSchema,
    OrderListResponse,
    OrderSchema,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/order")

ORDERS_PER_PAGE = 10


def get_factory_client(request: Request) -> FactoryClient:
    return request.app.state.factory_client


FactoryClientDep = Annotated[FactoryClient, Depends(get_factory_client)]


def _menu_item_to_schema(item) -> MenuItemSchema:
    return MenuItemSchema(
        id=item.id,
        title=item.title,
        description=item.description,
        image=item.image,
        price=item.price,
    )


def _order_to_schema(order) -> OrderSchema:
    return OrderSchema(
        id=order.id,
        diner_id=order.diner_id,
        franchise_id=order.franchise_id,
        store_id=order.store_id,
        date=order.date,
        items=[
            OrderItemSchema(id=i.id, menu_id=i.menu_id, description=i.description, price=i.price)
            for i in order.items
        ],
    )


def _order_to_history(order) -> OrderHistorySchema:
    return OrderHistorySchema(
        **_order_to_schema(order).model_dump(),
        jwt=order.fulfillment_jwt,
        report_url=order.report_url,
    )


@router.get("/menu", response_model=list[MenuItemSchema])
async def get_menu(repo: OrdersRepoDep) -> list[MenuItemSchema]:
    """Get the pizza menu."""
    return [_menu_item_to_schema(item) for item in await repo.list_menu()]


@router.put("/menu", response_model=list[MenuItemSchema])
async def add_menu_item(
    request: MenuItemCreate,
    current_user: CurrentUserDep,
    repo: OrdersRepoDep,
    session: SessionDep,
) -> list[MenuItemSchema]:
    """Add an item to the menu. Admin only."""
    enforce(authorize(current_user, Action.UPDATE_MENU), "unable to add menu item")
    await repo.add_menu_item(
        title=request.title,
        description=request.description,
        image=request.image,
        price=request.price,
    )
    await session.commit()
    return [_menu_item_to_schema(item) for item in await repo.list_menu()]


@router.get("", response_model=OrderListResponse)
async def list_orders(
    current_user: CurrentUserDep, repo: OrdersRepoDep, page: int = 0
) -> OrderListResponse:
    """Get the orders for the authenticated user, newest first."""
    enforce(authorize(current_user, Action.VIEW_ORDERS, Resource(owner_id=current_user.id)))
    orders, more = await repo.list_orders(current_user.id, page=page, limit=ORDERS_PER_PAGE)
    return OrderListResponse(
        diner_id=current_user.id,
        orders=[_order_to_history(o) for o in orders],
        page=page,
        more=more,
    )


@router.post("", response_model=OrderCreatedResponse)
async def create_order(
    request: OrderCreate,
    current_user: CurrentUserDep,
    repo: OrdersRepoDep,
    factory: FactoryClientDep,
    session: SessionDep,
) -> OrderCreatedResponse:
    """Create an order and send it to the factory for fulfillment."""
    enforce(authorize(current_user, Action.PLACE_ORDER, Resource(owner_id=current_user.id)))
    order = await repo.create_order(
        diner_id=current_user.id,
        franchise_id=request.franchise_id,
        store_id=request.store_id,
        items=[LineItem(i.menu_id, i.description, i.price) for i in request.items],
    )
    schema = _order_to_schema(order)
    # Pending orders are hidden from listings; committing here means no
    # transaction or write lock is held while the factory works.
    await session.commit()

    diner = {"id": current_user.id, "name": current_user.name, "email": current_user.email}
    try:
        result = await factory.fulfill(diner, schema.model_dump(mode="json", by_alias=True))
    except FactoryFulfillmentFailed:
        await repo.discard_order(order)
        await session.commit()
        raise
    await repo.attach_fulfillment(order, jwt=result.jwt, report_url=result.report_url)
    await session.commit()
    log.info("order_created", order_id=order.id, diner_id=current_user.id)
    return OrderCreatedResponse(order=schema, jwt=result.jwt, report_url=result.report_url)
