"""Menu model - a node of the menu/permission tree."""

import uuid
from enum import IntEnum
from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adminpanel.models.associations import role_menus
from adminpanel.models.base import BaseModel

if TYPE_CHECKING:
    from adminpanel.models.role import Role


class MenuType(IntEnum):
    GROUP = 0
    MENU = 1
    PERMISSION = 2


class MenuStatus(IntEnum):
    DISABLED = 0
    ENABLED = 1


class Menu(BaseModel):
    """Menu, group, or permission leaf.

    ``permission`` may hold several comma-joined permission strings,
    e.g. ``"system:user:list,system:user:read"``.
    """

    __tablename__ = "sys_menu"

    parent_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    permission: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type: Mapped[int] = mapped_column(Integer, nullable=False, default=MenuType.GROUP)
    order_no: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=MenuStatus.ENABLED)

    roles: Mapped[list["Role"]] = relationship(
        secondary=role_menus,
        back_populates="menus",
        lazy="noload",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Menu {self.name} type={self.type}>"
