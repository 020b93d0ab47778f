"""Pydantic schemas for user, role and menu management."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from adminpanel.models import AccountStatus, MenuStatus, MenuType


class RoleAssignmentRequest(BaseModel):
    role_ids: list[UUID] = Field(default_factory=list)


class AccountStatusRequest(BaseModel):
    status: AccountStatus


class AccountPasswordRequest(BaseModel):
    """Administrative password reset; the account's sessions end."""

    password: str = Field(..., min_length=8, max_length=128)


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    value: str = Field(..., min_length=1, max_length=255)
    remark: str | None = Field(None, max_length=255)
    menu_ids: list[UUID] = Field(default_factory=list)


class RoleMenusUpdate(BaseModel):
    menu_ids: list[UUID] = Field(default_factory=list)


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    value: str
    remark: str | None
    status: int


class MenuCreate(BaseModel):
    parent_id: UUID | None = None
    name: str = Field(..., min_length=1, max_length=255)
    path: str | None = Field(None, max_length=255)
    permission: str | None = Field(
        None,
        max_length=255,
        description="Comma-joined permission strings, e.g. system:user:list,system:user:read",
    )
    type: MenuType = MenuType.GROUP
    order_no: int = 0
    status: MenuStatus = MenuStatus.ENABLED


class MenuUpdate(BaseModel):
    parent_id: UUID | None = None
    name: str | None = Field(None, min_length=1, max_length=255)
    path: str | None = Field(None, max_length=255)
    permission: str | None = Field(None, max_length=255)
    type: MenuType | None = None
    order_no: int | None = None
    status: MenuStatus | None = None


class MenuResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    parent_id: UUID | None
    name: str
    path: str | None
    permission: str | None
    type: int
    order_no: int
    status: int


class MenuDeleteResponse(BaseModel):
    deleted_ids: list[UUID]
