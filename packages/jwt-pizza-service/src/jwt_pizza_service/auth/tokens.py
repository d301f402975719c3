"""Bearer token issue, verification and revocation."""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import structlog

from jwt_pizza_service.auth.models import CurrentUser
from jwt_pizza_service.db.models import UserModel
from jwt_pizza_service.db.repositories.sessions import SessionsRepo
from jwt_pizza_service.db.repositories.users import UsersRepo
from jwt_pizza_service.errors import InvalidToken, TokenRevoked

log = structlog.get_logger(__name__)

TOKEN_TYPE = "access"


class TokenService:
    """Signs HS256 tokens and tracks every issued token as a revocable session.

    Claims carry the user's id, name, email and roles, but ``verify`` always
    re-reads the user so role grants and deletions apply to existing tokens.
    """

    def __init__(
        self,
        users: UsersRepo,
        sessions: SessionsRepo,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int | None = None,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._secret = secret
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def issue(self, user: UserModel) -> str:
        now = datetime.now(UTC)
        jti = secrets.token_urlsafe(24)
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "name": user.name,
            "email": user.email,
            "roles": [
                {"role": r.role, "franchiseId": r.franchise_id} for r in user.roles
            ],
            "jti": jti,
            "iat": now,
            "type": TOKEN_TYPE,
        }
        if self._expire_minutes is not None:
            payload["exp"] = now + timedelta(minutes=self._expire_minutes)
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        await self._sessions.record(jti, user.id)
        return token

    def decode(self, token: str) -> dict[str, Any]:
        """Check signature and claim shape. Raises InvalidToken."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "jti"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken("invalid token") from exc
        if payload.get("type") != TOKEN_TYPE:
            raise InvalidToken("not an access token")
        try:
            payload["sub"] = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidToken("malformed token payload") from exc
        return payload

    async def verify(self, token: str) -> CurrentUser:
        payload = self.decode(token)
        session = await self._sessions.get(payload["jti"])
        if session is None or session.user_id != payload["sub"]:
            raise InvalidToken("unknown token")
        if session.revoked_at is not None:
            raise TokenRevoked("token revoked")
        user = await self._users.get_user(payload["sub"])
        if user is None:
            raise TokenRevoked("token revoked")
        return CurrentUser.from_model(user, token=token)

    async def revoke(self, token: str) -> None:
        payload = self.decode(token)
        if await self._sessions.revoke(payload["jti"]):
            log.info("token_revoked", user_id=payload["sub"])

    async def revoke_all_for(self, user_id: int) -> int:
        count = await self._sessions.revoke_all_for(user_id)
        log.info("user_tokens_revoked", user_id=user_id, count=count)
        return count
