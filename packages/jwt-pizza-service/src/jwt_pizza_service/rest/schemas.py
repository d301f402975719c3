"""Pydantic request/response models for REST API.

JSON bodies use camelCase (``franchiseId``); Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(ApiModel):
    message: str


# ---------------------------------------------------------------------------
# Users / auth
# ---------------------------------------------------------------------------


class RoleSchema(ApiModel):
    role: str
    franchise_id: int | None = None


class UserSchema(ApiModel):
    id: int
    name: str
    email: str
    roles: list[RoleSchema] = Field(default_factory=list)


class RegisterRequest(ApiModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class LoginRequest(ApiModel):
    email: str
    password: str


class UpdateUserRequest(ApiModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class AuthResponse(ApiModel):
    user: UserSchema
    token: str


class UserListResponse(ApiModel):
    users: list[UserSchema]
    more: bool


# ---------------------------------------------------------------------------
# Menu / orders
# ---------------------------------------------------------------------------


class MenuItemCreate(ApiModel):
    title: str = Field(min_length=1)
    description: str = ""
    image: str = ""
    price: float = Field(gt=0)


class MenuItemSchema(ApiModel):
    id: int
    title: str
    description: str
    image: str
    price: float


class OrderItemCreate(ApiModel):
    menu_id: int
    description: str
    price: float


class OrderItemSchema(OrderItemCreate):
    id: int


class OrderCreate(ApiModel):
    franchise_id: int
    store_id: int
    items: list[OrderItemCreate] = Field(min_length=1)


class OrderSchema(ApiModel):
    id: int
    diner_id: int
    franchise_id: int
    store_id: int
    date: datetime | None = None
    items: list[OrderItemSchema]


class OrderHistorySchema(OrderSchema):
    jwt: str
    report_url: str | None = None


class OrderCreatedResponse(ApiModel):
    order: OrderSchema
    jwt: str
    report_url: str | None = None


class OrderListResponse(ApiModel):
    diner_id: int
    orders: list[OrderHistorySchema]
    page: int
    more: bool


# ---------------------------------------------------------------------------
# Franchises / stores
# ---------------------------------------------------------------------------


class FranchiseAdminRef(ApiModel):
    email: str


class FranchiseCreate(ApiModel):
    name: str = Field(min_length=1)
    admins: list[FranchiseAdminRef] = Field(default_factory=list)


class FranchiseAdminSchema(ApiModel):
    id: int
    name: str
    email: str


class StoreCreate(ApiModel):
    name: str = Field(min_length=1)


class StoreSchema(ApiModel):
    id: int
    name: str
    franchise_id: int


class FranchiseSchema(ApiModel):
    id: int
    name: str
    admins: list[FranchiseAdminSchema] | None = None
    stores: list[StoreSchema] = Field(default_factory=list)


class FranchiseListResponse(ApiModel):
    franchises: list[FranchiseSchema]
    more: bool


# ---------------------------------------------------------------------------
# Service info
# ---------------------------------------------------------------------------


class WelcomeResponse(ApiModel):
    message: str
    version: str


class EndpointDoc(ApiModel):
    method: str
    path: str
    requires_auth: bool
    description: str = ""


class DocsResponse(ApiModel):
    version: str
    endpoints: list[EndpointDoc]
    config: dict[str, str]
