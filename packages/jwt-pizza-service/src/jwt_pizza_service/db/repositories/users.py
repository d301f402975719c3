"""Credential store: user records and their role assignments."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jwt_pizza_service.auth.models import Role
from jwt_pizza_service.auth.passwords import hash_password
from jwt_pizza_service.db.filters import filter_by_name, page_window, split_page
from jwt_pizza_service.db.models import UserModel, UserRoleModel
from jwt_pizza_service.errors import Conflict, NotFound


class UsersRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        roles: list[tuple[Role, int | None]] | None = None,
    ) -> UserModel:
        """Create a user with a bcrypt-hashed password. Defaults to the diner role."""
        if await self.get_user_by_email(email):
            raise Conflict("email already registered")
        assignments = roles or [(Role.DINER, None)]
        user = UserModel(
            name=name,
            email=email,
            password_hash=hash_password(password),
            roles=[UserRoleModel(role=role.value, franchise_id=fid) for role, fid in assignments],
        )
        self._session.add(user)
        await self._flush_unique_email()
        return user

    async def get_user(self, user_id: int) -> UserModel | None:
        return await self._session.get(UserModel, user_id)

    async def get_user_by_email(self, email: str) -> UserModel | None:
        result = await self._session.execute(select(UserModel).where(UserModel.email == email))
        return result.scalars().first()

    async def update_user(
        self,
        user_id: int,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> UserModel:
        user = await self.get_user(user_id)
        if user is None:
            raise NotFound("unknown user")
        if email is not None and email != user.email:
            if await self.get_user_by_email(email):
                raise Conflict("email already registered")
            user.email = email
        if name is not None:
            user.name = name
        if password:
            user.password_hash = hash_password(password)
        await self._flush_unique_email()
        return user

    async def _flush_unique_email(self) -> None:
        # A concurrent request can take the email between the lookup and the write.
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise Conflict("email already registered") from exc

    async def delete_user(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        if user is None:
            raise NotFound("unknown user")
        await self._session.delete(user)
        await self._session.flush()

    async def list_users(
        self, page: int = 0, limit: int = 10, name: str | None = None
    ) -> tuple[list[UserModel], bool]:
        query = filter_by_name(select(UserModel), UserModel.name, name).order_by(UserModel.id)
        result = await self._session.execute(page_window(query, page, limit))
        return split_page(list(result.scalars().all()), limit)

    async def grant_role(self, user: UserModel, role: Role, franchise_id: int | None = None) -> None:
        """Add a role assignment unless the user already holds it."""
        for existing in user.roles:
            if existing.role == role.value and existing.franchise_id == franchise_id:
                return
        user.roles.append(UserRoleModel(role=role.value, franchise_id=franchise_id))
        await self._session.flush()

    async def list_holders(self, role: Role, franchise_id: int) -> list[UserModel]:
        result = await self._session.execute(
            select(UserModel)
            .join(UserRoleModel, UserRoleModel.user_id == UserModel.id)
            .where(UserRoleModel.role == role.value, UserRoleModel.franchise_id == franchise_id)
            .order_by(UserModel.id)
        )
        return list(result.scalars().unique().all())
