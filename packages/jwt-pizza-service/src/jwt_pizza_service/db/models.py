"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


def _now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Users / sessions
# ---------------------------------------------------------------------------


class UserModel(Base):
    __tablename__ = "users"
    # Ids are never handed out twice; orders and sessions refer to users by id.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now)

    roles = relationship(
        "UserRoleModel",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="UserRoleModel.id",
    )


class UserRoleModel(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(32), nullable=False)
    # Only set for franchisee grants; a franchise delete leaves the grant in place.
    franchise_id = Column(Integer, nullable=True, index=True)

    user = relationship("UserModel", back_populates="roles")


class AuthSessionModel(Base):
    """One row per issued token; the revocation set is the rows with revoked_at set."""

    __tablename__ = "auth_sessions"

    jti = Column(String(64), primary_key=True)
    # No FK: rows must outlive the user so a deleted user's tokens stay revoked.
    user_id = Column(Integer, nullable=False, index=True)
    issued_at = Column(DateTime(timezone=True), default=_now)
    revoked_at = Column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Franchises / stores
# ---------------------------------------------------------------------------


class FranchiseModel(Base):
    __tablename__ = "franchises"
    # Franchisee grants outlive the franchise, so its id must never be reused.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_now)

    stores = relationship(
        "StoreModel",
        back_populates="franchise",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="StoreModel.id",
    )


class StoreModel(Base):
    __tablename__ = "stores"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    franchise_id = Column(
        Integer, ForeignKey("franchises.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)

    franchise = relationship("FranchiseModel", back_populates="stores")


# ---------------------------------------------------------------------------
# Menu / orders
# ---------------------------------------------------------------------------


class MenuItemModel(Base):
    __tablename__ = "menu"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    image = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)


class OrderModel(Base):
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    diner_id = Column(Integer, nullable=False, index=True)
    # Orders are history: they keep their ids after the franchise or store goes away.
    franchise_id = Column(Integer, nullable=False)
    store_id = Column(Integer, nullable=False)
    date = Column(DateTime(timezone=True), default=_now)
    # NULL while the factory call is in flight; pending orders are never listed.
    fulfillment_jwt = Column(Text, nullable=True)
    report_url = Column(Text, nullable=True)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItemModel.id",
    )


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    menu_id = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("OrderModel", back_populates="items")
