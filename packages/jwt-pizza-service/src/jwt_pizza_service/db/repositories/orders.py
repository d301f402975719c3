"""Repository for the menu and diner orders."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jwt_pizza_service.db.filters import page_window, split_page
from jwt_pizza_service.db.models import MenuItemModel, OrderItemModel, OrderModel, StoreModel
from jwt_pizza_service.errors import NotFound, ValidationError


@dataclass
class LineItem:
    menu_id: int
    description: str
    price: float


class OrdersRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # -- menu ---------------------------------------------------------------

    async def add_menu_item(
        self, title: str, description: str, image: str, price: float
    ) -> MenuItemModel:
        if price <= 0:
            raise ValidationError("price must be positive")
        item = MenuItemModel(title=title, description=description, image=image, price=price)
        self._session.add(item)
        await self._session.flush()
        return item

    async def list_menu(self) -> list[MenuItemModel]:
        result = await self._session.execute(select(MenuItemModel).order_by(MenuItemModel.id))
        return list(result.scalars().all())

    # -- orders -------------------------------------------------------------

    async def create_order(
        self,
        diner_id: int,
        franchise_id: int,
        store_id: int,
        items: list[LineItem],
    ) -> OrderModel:
        """Stage a pending order in the current transaction.

        The order stays hidden from listings until :meth:`attach_fulfillment`
        records the factory jwt.
        """
        if not items:
            raise ValidationError("an order needs at least one item")
        store = await self._session.execute(
            select(StoreModel.id).where(
                StoreModel.id == store_id, StoreModel.franchise_id == franchise_id
            )
        )
        if store.scalar_one_or_none() is None:
            raise NotFound("unknown store")

        order = OrderModel(
            diner_id=diner_id,
            franchise_id=franchise_id,
            store_id=store_id,
            items=[
                OrderItemModel(menu_id=i.menu_id, description=i.description, price=i.price)
                for i in items
            ],
        )
        self._session.add(order)
        await self._session.flush()
        return order

    async def attach_fulfillment(self, order: OrderModel, jwt: str, report_url: str | None) -> None:
        order.fulfillment_jwt = jwt
        order.report_url = report_url
        await self._session.flush()

    async def discard_order(self, order: OrderModel) -> None:
        """Remove a pending order the factory refused."""
        await self._session.delete(order)
        await self._session.flush()

    async def list_orders(
        self, diner_id: int, page: int = 0, limit: int = 10
    ) -> tuple[list[OrderModel], bool]:
        query = (
            select(OrderModel)
            .where(OrderModel.diner_id == diner_id, OrderModel.fulfillment_jwt.is_not(None))
            .order_by(OrderModel.id.desc())
        )
        result = await self._session.execute(page_window(query, page, limit))
        return split_page(list(result.scalars().all()), limit)
