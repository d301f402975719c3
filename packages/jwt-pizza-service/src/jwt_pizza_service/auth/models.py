"""Auth domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    DINER = "diner"
    FRANCHISEE = "franchisee"
    ADMIN = "admin"


@dataclass(frozen=True)
class RoleAssignment:
    role: Role
    franchise_id: int | None = None


@dataclass
class CurrentUser:
    """The authenticated caller, re-read from the user table on every request."""

    id: int
    name: str
    email: str
    roles: list[RoleAssignment] = field(default_factory=list)
    token: str | None = None

    @classmethod
    def from_model(cls, user, token: str | None = None) -> CurrentUser:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            roles=[RoleAssignment(Role(r.role), r.franchise_id) for r in user.roles],
            token=token,
        )

    def has_role(self, role: Role, franchise_id: int | None = None) -> bool:
        for assignment in self.roles:
            if assignment.role != role:
                continue
            if franchise_id is None or assignment.franchise_id == franchise_id:
                return True
        return False

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)
