"""Authentication service: login, logout and permission cache population."""

import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adminpanel.core.exceptions import InvalidCredentialsError
from adminpanel.models import Account
from adminpanel.services.permission import PermissionResolver
from adminpanel.services.session_store import SessionStore
from adminpanel.services.tokens import TokenClaims, TokenCodec

logger = logging.getLogger(__name__)

# Argon2 password hasher with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

# Fresh sessions always start at password version 1
INITIAL_PASSWORD_VERSION = 1


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison."""
    try:
        ph.verify(password_hash, password)
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("dummy-password-for-timing")


@dataclass(frozen=True)
class LoginResult:
    account: Account
    access_token: str
    expires_in: int


class AuthService:
    """Orchestrates login/logout and the per-account session records."""

    def __init__(
        self,
        session: AsyncSession,
        store: SessionStore,
        codec: TokenCodec,
        resolver: PermissionResolver,
        multi_device_login: bool = True,
    ):
        self.session = session
        self.store = store
        self.codec = codec
        self.resolver = resolver
        self.multi_device_login = multi_device_login

    async def get_account_by_username(self, username: str) -> Account | None:
        result = await self.session.execute(select(Account).where(Account.username == username))
        return result.scalar_one_or_none()

    async def authenticate(self, username: str, password: str) -> Account:
        """Return the account for valid credentials.

        Missing users, wrong passwords and disabled accounts all raise the
        same InvalidCredentialsError to prevent user enumeration.
        """
        account = await self.get_account_by_username(username)

        if account is None:
            # Perform a dummy verification to keep timing uniform
            verify_password(password, _dummy_hash())
            raise InvalidCredentialsError()

        if not verify_password(password, account.password_hash):
            raise InvalidCredentialsError()

        if not account.is_enabled:
            logger.info("Login refused for disabled account: %s", account.username)
            raise InvalidCredentialsError()

        return account

    async def login(self, username: str, password: str) -> LoginResult:
        account = await self.authenticate(username, password)

        role_ids = await self.resolver.resolve_role_ids(account.id)
        roles = await self.resolver.resolve_role_values(role_ids)

        token = self.codec.sign(
            TokenClaims(uid=account.id, pv=INITIAL_PASSWORD_VERSION, roles=tuple(roles))
        )

        # Last writer wins: a concurrent login elsewhere may overwrite this slot
        await self.store.set_token(account.id, token, self.codec.expires_in)
        await self.store.set_password_version(account.id, INITIAL_PASSWORD_VERSION)

        logger.info("User logged in: %s", account.username)
        return LoginResult(account=account, access_token=token, expires_in=self.codec.expires_in)

    async def logout(self, claims: TokenClaims, token: str) -> None:
        """Revoke the presented token for the rest of its lifetime.

        With multi-device login the account record stays: the token slot keeps
        the account in the online scan, so other devices still get permission
        refreshes. Single-device logout drops the whole record.
        """
        remaining = claims.remaining_seconds()
        ttl = remaining if remaining is not None else self.codec.expires_in
        await self.store.blacklist(token, ttl)

        if not self.multi_device_login:
            await self.store.clear_account(claims.uid)

        logger.info("User logged out: %s", claims.uid)

    async def get_permissions(self, account_id: uuid.UUID) -> list[str]:
        """Cached permission strings, resolving and caching on a miss."""
        cached = await self.store.get_permission_cache(account_id)
        if cached is not None:
            return cached
        permissions = await self.resolver.resolve_permissions(account_id)
        await self.store.set_permission_cache(account_id, permissions)
        return permissions

    async def get_password_version(self, account_id: uuid.UUID) -> int | None:
        return await self.store.get_password_version(account_id)

    async def get_token(self, account_id: uuid.UUID) -> str | None:
        return await self.store.get_token(account_id)
