"""Role model - a named bundle of menu/permission grants."""

import uuid
from enum import IntEnum
from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adminpanel.core.exceptions import BusinessError, ErrorCode
from adminpanel.models.associations import account_roles, role_menus
from adminpanel.models.base import BaseModel

if TYPE_CHECKING:
    from adminpanel.models.account import Account
    from adminpanel.models.menu import Menu

# The root role grants every permission. Seeded by the initial migration.
ROOT_ROLE_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
ROOT_ROLE_VALUE = "admin"


class RoleStatus(IntEnum):
    DISABLED = 0
    ENABLED = 1


class Role(BaseModel):
    """Role with a unique value token (e.g. "admin", "user")."""

    __tablename__ = "sys_role"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    remark: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=RoleStatus.ENABLED)

    accounts: Mapped[list["Account"]] = relationship(
        secondary=account_roles,
        back_populates="roles",
        lazy="noload",
        passive_deletes=True,
    )
    menus: Mapped[list["Menu"]] = relationship(
        secondary=role_menus,
        back_populates="roles",
        lazy="selectin",
    )

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_ROLE_ID

    def __repr__(self) -> str:
        return f"<Role {self.value}>"


@event.listens_for(Role, "before_delete")
def _protect_root_role(mapper, connection, target: Role) -> None:
    if target.id == ROOT_ROLE_ID:
        raise BusinessError(ErrorCode.SYSTEM_BUILTIN_FUNCTION_NOT_ALLOWED)
