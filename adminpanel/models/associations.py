"""Many-to-many junction tables for the account/role/menu graph."""

from sqlalchemy import Column, ForeignKey, Table, Uuid

from adminpanel.models.base import Base

account_roles = Table(
    "sys_user_roles",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("sys_user.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid, ForeignKey("sys_role.id", ondelete="CASCADE"), primary_key=True),
)

role_menus = Table(
    "sys_role_menus",
    Base.metadata,
    Column("role_id", Uuid, ForeignKey("sys_role.id", ondelete="CASCADE"), primary_key=True),
    Column("menu_id", Uuid, ForeignKey("sys_menu.id", ondelete="CASCADE"), primary_key=True),
)
