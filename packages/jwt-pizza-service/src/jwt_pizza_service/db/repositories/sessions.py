"""Repository for issued tokens and the revocation set."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from jwt_pizza_service.db.models import AuthSessionModel


class SessionsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(self, jti: str, user_id: int) -> AuthSessionModel:
        row = AuthSessionModel(jti=jti, user_id=user_id)
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, jti: str) -> AuthSessionModel | None:
        return await self._session.get(AuthSessionModel, jti)

    async def revoke(self, jti: str) -> bool:
        """Mark one session revoked. Returns False when it was already revoked or unknown."""
        row = await self.get(jti)
        if row is None or row.revoked_at is not None:
            return False
        row.revoked_at = datetime.now(UTC)
        await self._session.flush()
        return True

    async def revoke_all_for(self, user_id: int) -> int:
        result = await self._session.execute(
            update(AuthSessionModel)
            .where(AuthSessionModel.user_id == user_id, AuthSessionModel.revoked_at.is_(None))
            .values(revoked_at=datetime.now(UTC))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
