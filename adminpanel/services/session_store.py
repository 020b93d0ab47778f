"""Redis-backed session registry.

Per account: the current access token (TTL = token lifetime), the password
version, and the cached permission strings (no TTL, invalidated explicitly).
Per revoked token: a blacklist entry living for the token's remaining
lifetime. Keys are plain strings with no relation to the relational store.
"""

import json
import logging
import uuid
from collections.abc import AsyncIterator

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
PASSWORD_VERSION_KEY = "passwordVersion"
PERMISSIONS_KEY = "perms"
BLACKLIST_KEY = "token-blacklist"

# Increment only when the key exists, so a bump racing a session clear
# cannot recreate a password version for a logged-out account.
_BUMP_IF_EXISTS_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
  return redis.call('INCR', KEYS[1])
end
return nil
"""


class SessionStore:
    """Session state for accounts and the token blacklist."""

    def __init__(self, client: aioredis.Redis, prefix: str = "admin"):
        self.client = client
        self.prefix = prefix
        self._bump_if_exists = client.register_script(_BUMP_IF_EXISTS_SCRIPT)

    # --- Key naming ---

    def token_key(self, account_id: uuid.UUID | str) -> str:
        return f"{self.prefix}:{TOKEN_KEY}:{account_id}"

    def password_version_key(self, account_id: uuid.UUID | str) -> str:
        return f"{self.prefix}:{PASSWORD_VERSION_KEY}:{account_id}"

    def permissions_key(self, account_id: uuid.UUID | str) -> str:
        return f"{self.prefix}:{PERMISSIONS_KEY}:{account_id}"

    def blacklist_key(self, token: str) -> str:
        return f"{self.prefix}:{BLACKLIST_KEY}:{token}"

    # --- Access token ---

    async def set_token(self, account_id: uuid.UUID, token: str, ttl_seconds: int) -> None:
        await self.client.set(self.token_key(account_id), token, ex=max(1, ttl_seconds))

    async def get_token(self, account_id: uuid.UUID) -> str | None:
        return await self.client.get(self.token_key(account_id))

    async def online_account_ids(self) -> AsyncIterator[uuid.UUID]:
        """Yield ids of accounts holding a live token (SCAN over the token namespace)."""
        prefix = self.token_key("")
        async for key in self.client.scan_iter(match=f"{prefix}*", count=500):
            try:
                yield uuid.UUID(key[len(prefix) :])
            except ValueError:
                logger.warning("Skipping malformed token key %s", key)

    # --- Password version ---

    async def set_password_version(self, account_id: uuid.UUID, version: int) -> None:
        await self.client.set(self.password_version_key(account_id), version)

    async def get_password_version(self, account_id: uuid.UUID) -> int | None:
        value = await self.client.get(self.password_version_key(account_id))
        return int(value) if value is not None else None

    async def bump_password_version(self, account_id: uuid.UUID) -> int | None:
        """Increment the version of an account with an active session; no-op otherwise."""
        result = await self._bump_if_exists(keys=[self.password_version_key(account_id)])
        return int(result) if result is not None else None

    # --- Permission cache ---

    async def set_permission_cache(self, account_id: uuid.UUID, permissions: list[str]) -> None:
        await self.client.set(self.permissions_key(account_id), json.dumps(permissions))

    async def get_permission_cache(self, account_id: uuid.UUID) -> list[str] | None:
        value = await self.client.get(self.permissions_key(account_id))
        if value is None:
            return None
        try:
            permissions = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt permission cache for account %s", account_id)
            return None
        if not isinstance(permissions, list):
            return None
        return [str(p) for p in permissions]

    # --- Whole-account state ---

    async def clear_account(self, account_id: uuid.UUID) -> None:
        """Drop token, password version and permission cache for an account.

        A single multi-key DEL; losing it midway is harmless because the next
        login rewrites every key.
        """
        await self.client.delete(
            self.token_key(account_id),
            self.password_version_key(account_id),
            self.permissions_key(account_id),
        )

    # --- Blacklist ---

    async def blacklist(self, token: str, ttl_seconds: int) -> None:
        await self.client.set(self.blacklist_key(token), "1", ex=max(1, ttl_seconds))

    async def is_blacklisted(self, token: str) -> bool:
        return bool(await self.client.exists(self.blacklist_key(token)))
