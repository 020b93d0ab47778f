"""Menu service - menu/permission tree maintenance."""

import logging
import uuid
from typing import Any

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from adminpanel.core.exceptions import BusinessError, ErrorCode
from adminpanel.models import Menu, MenuType, role_menus
from adminpanel.services.permission import PermissionResolver

logger = logging.getLogger(__name__)


class MenuService:
    """Service for managing menu nodes.

    Mutations touching a permission string refresh every online account's
    cached permissions.
    """

    def __init__(self, db: AsyncSession, resolver: PermissionResolver):
        self.db = db
        self.resolver = resolver

    async def list_menus(self) -> list[Menu]:
        result = await self.db.execute(select(Menu).order_by(Menu.order_no, Menu.name))
        return list(result.scalars().all())

    async def get(self, menu_id: uuid.UUID) -> Menu:
        menu = await self.db.get(Menu, menu_id)
        if menu is None:
            raise BusinessError(ErrorCode.MENU_NOT_FOUND)
        return menu

    async def check(self, menu_type: int, parent_id: uuid.UUID | None) -> None:
        """Creation-time tree rules.

        A permission node needs a parent; a menu's parent must exist and
        must not itself be a menu.
        """
        if menu_type == MenuType.PERMISSION and parent_id is None:
            raise BusinessError(ErrorCode.PERMISSION_REQUIRES_PARENT)
        if menu_type == MenuType.MENU and parent_id is not None:
            parent = await self.db.get(Menu, parent_id)
            if parent is None:
                raise BusinessError(ErrorCode.PARENT_MENU_NOT_FOUND)
            if parent.type == MenuType.MENU:
                raise BusinessError(ErrorCode.ILLEGAL_OPERATION_DIRECTORY_PARENT)

    async def create(self, data: dict[str, Any]) -> Menu:
        await self.check(data.get("type", MenuType.GROUP), data.get("parent_id"))
        menu = Menu(**data)
        self.db.add(menu)
        await self.db.commit()
        await self.db.refresh(menu)

        if menu.permission:
            await self.resolver.refresh_all()
        return menu

    async def update(self, menu_id: uuid.UUID, data: dict[str, Any]) -> Menu:
        menu = await self.get(menu_id)
        old_permission = menu.permission
        await self.check(data.get("type", menu.type), data.get("parent_id", menu.parent_id))

        for key, value in data.items():
            setattr(menu, key, value)
        await self.db.commit()

        if old_permission or menu.permission:
            await self.resolver.refresh_all()
        return menu

    async def find_descendant_ids(self, menu_id: uuid.UUID) -> list[uuid.UUID]:
        """Ids of every node below ``menu_id``."""
        descendants: list[uuid.UUID] = []
        frontier = [menu_id]
        while frontier:
            result = await self.db.execute(select(Menu.id).where(Menu.parent_id.in_(frontier)))
            frontier = [child for child in result.scalars().all() if child not in descendants]
            descendants.extend(frontier)
        return descendants

    async def has_roles(self, menu_ids: list[uuid.UUID]) -> bool:
        result = await self.db.execute(select(exists().where(role_menus.c.menu_id.in_(menu_ids))))
        return bool(result.scalar())

    async def delete(self, menu_id: uuid.UUID) -> list[uuid.UUID]:
        """Delete a node together with its subtree. Returns the deleted ids.

        Refused while any node in the subtree is still granted to a role.
        """
        menu = await self.get(menu_id)
        ids = [menu.id, *await self.find_descendant_ids(menu.id)]
        if await self.has_roles(ids):
            raise BusinessError(ErrorCode.MENU_HAS_ASSOCIATED_ROLES)

        result = await self.db.execute(select(Menu).where(Menu.id.in_(ids)))
        menus = list(result.scalars().all())
        carried_permission = any(m.permission for m in menus)
        for node in menus:
            await self.db.delete(node)
        await self.db.commit()

        logger.info(f"Deleted {len(menus)} menu node(s) under {menu.name}")
        if carried_permission:
            await self.resolver.refresh_all()
        return ids
