"""Role service - role CRUD and role/menu assignment."""

import logging
import uuid

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from adminpanel.core.exceptions import BusinessError, ErrorCode
from adminpanel.models import ROOT_ROLE_ID, Menu, Role, account_roles
from adminpanel.services.permission import PermissionResolver

logger = logging.getLogger(__name__)


class RoleService:
    """Service for managing roles.

    Any change to a role's menus refreshes every online account's cached
    permissions.
    """

    def __init__(self, db: AsyncSession, resolver: PermissionResolver):
        self.db = db
        self.resolver = resolver

    async def list_roles(self) -> list[Role]:
        result = await self.db.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def get(self, role_id: uuid.UUID) -> Role:
        role = await self.db.get(Role, role_id)
        if role is None:
            raise BusinessError(ErrorCode.ROLE_NOT_FOUND)
        return role

    async def _load_menus(self, menu_ids: list[uuid.UUID]) -> list[Menu]:
        if not menu_ids:
            return []
        result = await self.db.execute(select(Menu).where(Menu.id.in_(menu_ids)))
        menus = list(result.scalars().all())
        if len(menus) != len(set(menu_ids)):
            raise BusinessError(ErrorCode.MENU_NOT_FOUND)
        return menus

    async def create(
        self,
        name: str,
        value: str,
        remark: str | None = None,
        menu_ids: list[uuid.UUID] | None = None,
    ) -> Role:
        role = Role(name=name, value=value, remark=remark, menus=await self._load_menus(menu_ids or []))
        self.db.add(role)
        await self.db.commit()
        await self.db.refresh(role)
        logger.info(f"Created role {value}")
        return role

    async def update_menus(self, role_id: uuid.UUID, menu_ids: list[uuid.UUID]) -> Role:
        """Replace the role's menus; an empty list clears them."""
        role = await self.get(role_id)
        role.menus = await self._load_menus(menu_ids)
        await self.db.commit()

        await self.resolver.refresh_all()
        return role

    async def has_accounts(self, role_id: uuid.UUID) -> bool:
        result = await self.db.execute(select(exists().where(account_roles.c.role_id == role_id)))
        return bool(result.scalar())

    async def delete(self, role_id: uuid.UUID) -> None:
        if role_id == ROOT_ROLE_ID:
            raise BusinessError(ErrorCode.SYSTEM_BUILTIN_FUNCTION_NOT_ALLOWED)
        role = await self.get(role_id)
        if await self.has_accounts(role_id):
            raise BusinessError(ErrorCode.ROLE_HAS_ASSOCIATED_USERS)

        await self.db.delete(role)
        await self.db.commit()
        logger.info(f"Deleted role {role.value}")
