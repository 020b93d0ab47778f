"""Account service - registration, passwords, status and role assignment."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adminpanel.core.exceptions import BusinessError, ErrorCode
from adminpanel.models import Account, AccountStatus, Role
from adminpanel.services.auth import hash_password, verify_password
from adminpanel.services.permission import PermissionResolver
from adminpanel.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing accounts and keeping their sessions consistent."""

    def __init__(self, db: AsyncSession, store: SessionStore, resolver: PermissionResolver):
        self.db = db
        self.store = store
        self.resolver = resolver

    async def get(self, account_id: uuid.UUID) -> Account:
        account = await self.db.get(Account, account_id)
        if account is None:
            raise BusinessError(ErrorCode.USER_NOT_FOUND)
        return account

    async def list_accounts(self) -> list[Account]:
        result = await self.db.execute(select(Account).order_by(Account.username))
        return list(result.scalars().all())

    async def _load_roles(self, role_ids: list[uuid.UUID]) -> list[Role]:
        if not role_ids:
            return []
        result = await self.db.execute(select(Role).where(Role.id.in_(role_ids)))
        roles = list(result.scalars().all())
        if len(roles) != len(set(role_ids)):
            raise BusinessError(ErrorCode.ROLE_NOT_FOUND)
        return roles

    async def register(
        self,
        username: str,
        password: str,
        nickname: str | None = None,
        email: str | None = None,
        role_ids: list[uuid.UUID] | None = None,
    ) -> Account:
        """Create a new enabled account."""
        existing = await self.db.execute(select(Account.id).where(Account.username == username))
        if existing.scalar_one_or_none() is not None:
            raise BusinessError(ErrorCode.SYSTEM_USER_EXISTS)

        account = Account(
            username=username,
            password_hash=hash_password(password),
            nickname=nickname,
            email=email,
            status=AccountStatus.ENABLED,
            roles=await self._load_roles(role_ids or []),
        )
        self.db.add(account)
        await self.db.commit()
        await self.db.refresh(account)

        logger.info(f"Registered account: {username}")
        return account

    async def change_password(
        self, account_id: uuid.UUID, old_password: str, new_password: str
    ) -> None:
        """Change a password after checking the old one; invalidates issued tokens."""
        account = await self.get(account_id)
        if not verify_password(old_password, account.password_hash):
            raise BusinessError(ErrorCode.PASSWORD_MISMATCH)
        await self.force_update_password(account_id, new_password)

    async def force_update_password(self, account_id: uuid.UUID, new_password: str) -> None:
        account = await self.get(account_id)
        account.password_hash = hash_password(new_password)
        await self.db.commit()

        version = await self.store.bump_password_version(account_id)
        logger.info(f"Password changed for account {account.username} (session version {version})")

    async def set_status(self, account_id: uuid.UUID, status: AccountStatus) -> Account:
        """Enable or disable an account. Disabling purges its session state."""
        account = await self.get(account_id)
        account.status = status
        await self.db.commit()

        if status == AccountStatus.DISABLED:
            await self.store.clear_account(account_id)
            logger.info(f"Disabled account {account.username}")
        return account

    async def assign_roles(self, account_id: uuid.UUID, role_ids: list[uuid.UUID]) -> Account:
        """Replace an account's roles and refresh its cached permissions."""
        account = await self.get(account_id)
        account.roles = await self._load_roles(role_ids)
        await self.db.commit()

        await self.resolver.refresh_one(account_id)
        return account

    async def delete(self, account_id: uuid.UUID) -> None:
        account = await self.get(account_id)
        if any(role.is_root for role in account.roles):
            raise BusinessError(ErrorCode.SYSTEM_BUILTIN_FUNCTION_NOT_ALLOWED)

        await self.db.delete(account)
        await self.db.commit()
        await self.store.clear_account(account_id)
        logger.info(f"Deleted account {account.username}")
