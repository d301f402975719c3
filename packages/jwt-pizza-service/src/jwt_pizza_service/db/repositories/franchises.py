"""Repository for franchises and their stores."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jwt_pizza_service.auth.models import Role
from jwt_pizza_service.db.filters import filter_by_name, page_window, split_page
from jwt_pizza_service.db.models import FranchiseModel, StoreModel, UserModel, UserRoleModel
from jwt_pizza_service.db.repositories.users import UsersRepo
from jwt_pizza_service.errors import NotFound


class FranchisesRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UsersRepo(session)

    async def create_franchise(
        self, name: str, admin_emails: list[str]
    ) -> tuple[FranchiseModel, list[UserModel]]:
        """Create a franchise and make every listed user a franchisee of it.

        All emails are resolved before anything is written, so an unknown
        email leaves no partial franchise behind.
        """
        admins: list[UserModel] = []
        for email in admin_emails:
            user = await self._users.get_user_by_email(email)
            if user is None:
                raise NotFound(f"unknown user for franchise admin {email} provided")
            if user not in admins:
                admins.append(user)

        franchise = FranchiseModel(name=name, stores=[])
        self._session.add(franchise)
        await self._session.flush()

        for user in admins:
            await self._users.grant_role(user, Role.FRANCHISEE, franchise.id)
        return franchise, admins

    async def get_franchise(self, franchise_id: int) -> FranchiseModel | None:
        return await self._session.get(FranchiseModel, franchise_id)

    async def delete_franchise(self, franchise_id: int) -> None:
        franchise = await self.get_franchise(franchise_id)
        if franchise is None:
            raise NotFound("unknown franchise")
        await self._session.delete(franchise)
        await self._session.flush()

    async def list_franchises(
        self, page: int = 0, limit: int = 10, name: str | None = None
    ) -> tuple[list[FranchiseModel], bool]:
        query = filter_by_name(select(FranchiseModel), FranchiseModel.name, name)
        query = query.order_by(FranchiseModel.id)
        result = await self._session.execute(page_window(query, page, limit))
        return split_page(list(result.scalars().all()), limit)

    async def list_franchises_for_user(self, user_id: int) -> list[FranchiseModel]:
        result = await self._session.execute(
            select(FranchiseModel)
            .join(UserRoleModel, UserRoleModel.franchise_id == FranchiseModel.id)
            .where(
                UserRoleModel.user_id == user_id,
                UserRoleModel.role == Role.FRANCHISEE.value,
            )
            .order_by(FranchiseModel.id)
        )
        return list(result.scalars().unique().all())

    async def list_admins(self, franchise_id: int) -> list[UserModel]:
        return await self._users.list_holders(Role.FRANCHISEE, franchise_id)

    async def create_store(self, franchise_id: int, name: str) -> StoreModel:
        franchise = await self.get_franchise(franchise_id)
        if franchise is None:
            raise NotFound("unknown franchise")
        store = StoreModel(franchise_id=franchise.id, name=name)
        franchise.stores.append(store)
        await self._session.flush()
        return store

    async def get_store(self, franchise_id: int, store_id: int) -> StoreModel | None:
        result = await self._session.execute(
            select(StoreModel).where(
                StoreModel.id == store_id, StoreModel.franchise_id == franchise_id
            )
        )
        return result.scalars().first()

    async def delete_store(self, franchise_id: int, store_id: int) -> None:
        store = await self.get_store(franchise_id, store_id)
        if store is None:
            raise NotFound("unknown store")
        await self._session.delete(store)
        await self._session.flush()
