"""Permission resolution over the account -> role -> menu graph.

Permissions are resolved from the relational store and cached per account in
the session store. The cache is only refreshed when the service layer says so
(``refresh_one`` / ``refresh_all``); direct database edits are not observed.
"""

import asyncio
import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adminpanel.models import ROOT_ROLE_ID, Menu, MenuType, Role, account_roles, role_menus
from adminpanel.services.session_store import SessionStore

logger = logging.getLogger(__name__)

PERMISSION_NODE_TYPES = (MenuType.MENU, MenuType.PERMISSION)


def is_admin(role_ids: Iterable[uuid.UUID]) -> bool:
    """True iff the root role is among the given role ids."""
    return ROOT_ROLE_ID in set(role_ids)


def flatten_permissions(fields: Iterable[str | None]) -> list[str]:
    """Split comma-joined permission fields into unique tokens, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in fields:
        if not value:
            continue
        for token in value.split(","):
            token = token.strip()
            if token:
                seen.setdefault(token, None)
    return list(seen)


class PermissionResolver:
    """Computes flattened permission-string sets and maintains their cache.

    Each query opens its own session from ``session_maker`` so that
    ``refresh_all`` can fan out concurrently.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        store: SessionStore,
        concurrency: int = 10,
    ):
        self.session_maker = session_maker
        self.store = store
        self.concurrency = max(1, concurrency)

    async def resolve_role_ids(self, account_id: uuid.UUID) -> set[uuid.UUID]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(account_roles.c.role_id).where(account_roles.c.user_id == account_id)
            )
            return set(result.scalars().all())

    async def resolve_role_values(self, role_ids: Iterable[uuid.UUID]) -> list[str]:
        role_ids = list(role_ids)
        if not role_ids:
            return []
        async with self.session_maker() as session:
            result = await session.execute(
                select(Role.value).where(Role.id.in_(role_ids)).order_by(Role.value)
            )
            return list(result.scalars().all())

    async def resolve_permissions(self, account_id: uuid.UUID) -> list[str]:
        """Flattened permission strings for an account.

        Admins get every permission string in the tree (the gate never matches
        against it for admins, the list is for clients rendering the UI).
        Accounts without roles get an empty list.
        """
        role_ids = await self.resolve_role_ids(account_id)
        if not role_ids:
            return []

        query = select(Menu.permission).where(
            Menu.type.in_([int(t) for t in PERMISSION_NODE_TYPES]),
            Menu.permission.is_not(None),
        )
        if not is_admin(role_ids):
            query = (
                query.join(role_menus, role_menus.c.menu_id == Menu.id)
                .where(role_menus.c.role_id.in_(role_ids))
                .distinct()
            )

        async with self.session_maker() as session:
            result = await session.execute(query)
            return flatten_permissions(result.scalars().all())

    async def refresh_one(self, account_id: uuid.UUID) -> bool:
        """Recompute the cached permissions of an online account.

        Offline accounts are skipped. Returns True when the cache was written.
        """
        if await self.store.get_token(account_id) is None:
            return False
        permissions = await self.resolve_permissions(account_id)
        await self.store.set_permission_cache(account_id, permissions)
        return True

    async def refresh_all(self) -> int:
        """Refresh every online account, at most ``concurrency`` at a time."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _refresh(account_id: uuid.UUID) -> bool:
            async with semaphore:
                return await self.refresh_one(account_id)

        account_ids = [account_id async for account_id in self.store.online_account_ids()]
        results = await asyncio.gather(*(_refresh(account_id) for account_id in account_ids))
        refreshed = sum(1 for r in results if r)
        logger.info("Refreshed permission cache for %d online account(s)", refreshed)
        return refreshed
