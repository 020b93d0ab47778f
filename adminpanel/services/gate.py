"""Request gate: per-request authentication and authorization.

Each route declares a RouteAuth record. The gate evaluates it in a fixed
order and any failure ends the request with a typed error:

1. public route              -> allowed, no identity
2. extract bearer token      (header, or ?token= for event streams)
3. blacklist lookup          -> InvalidLoginError
4. signature / claims        -> InvalidLoginError (or anonymous if optional)
5. stream path uid matches   -> UnauthorizedError
6. password version matches  -> InvalidLoginError
7. single-session token      -> AccountLoggedInElsewhereError
8. required permissions      -> NoPermissionError
9. identity returned to the caller
"""

import logging
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from adminpanel.core.exceptions import (
    AccountLoggedInElsewhereError,
    BusinessError,
    InvalidLoginError,
    NoPermissionError,
    StoreUnavailableError,
    UnauthorizedError,
)
from adminpanel.models.role import ROOT_ROLE_VALUE
from adminpanel.services.session_store import SessionStore
from adminpanel.services.tokens import TokenClaims, TokenCodec, TokenError

logger = logging.getLogger(__name__)

EVENT_STREAM = "text/event-stream"
BEARER_PREFIX = "Bearer "


class AuthStrategy(str, Enum):
    PUBLIC = "public"
    BEARER_JWT = "jwt"


@dataclass(frozen=True)
class RouteAuth:
    """Authentication requirements attached to a route.

    ``permissions`` uses all-of semantics. ``optional`` bearer routes let
    requests without a verifiable token through anonymously.
    """

    strategy: AuthStrategy = AuthStrategy.BEARER_JWT
    permissions: tuple[str, ...] = ()
    optional: bool = False

    @classmethod
    def public(cls) -> "RouteAuth":
        return cls(strategy=AuthStrategy.PUBLIC)

    @classmethod
    def login(cls, optional: bool = False) -> "RouteAuth":
        return cls(strategy=AuthStrategy.BEARER_JWT, optional=optional)

    @classmethod
    def require(cls, *permissions: str) -> "RouteAuth":
        return cls(strategy=AuthStrategy.BEARER_JWT, permissions=tuple(permissions))


@dataclass(frozen=True)
class GateRequest:
    """The parts of an HTTP request the gate looks at."""

    authorization: str | None = None
    accept: str | None = None
    query_token: str | None = None
    path_uid: str | None = None

    @property
    def is_event_stream(self) -> bool:
        return bool(self.accept) and EVENT_STREAM in self.accept


@dataclass(frozen=True)
class AuthUser:
    """Identity resolved for a request."""

    claims: TokenClaims
    token: str = field(repr=False)

    @property
    def uid(self) -> uuid.UUID:
        return self.claims.uid

    @property
    def pv(self) -> int:
        return self.claims.pv

    @property
    def roles(self) -> tuple[str, ...]:
        return self.claims.roles

    @property
    def is_admin(self) -> bool:
        return ROOT_ROLE_VALUE in self.claims.roles


class PermissionSource(Protocol):
    async def get_permissions(self, account_id: uuid.UUID) -> list[str]: ...


def extract_token(request: GateRequest) -> str | None:
    """Bearer token from the Authorization header, or the query for event streams."""
    header = request.authorization or ""
    if header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX) :].strip() or None
    if request.is_event_stream and request.query_token:
        return request.query_token
    return None


@contextmanager
def store_errors(fallback: Callable[[], BusinessError]) -> Iterator[None]:
    """Fail closed on store errors; unreachable stores surface as server errors."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError, OperationalError, OSError) as e:
        logger.error("Store unreachable during auth gate: %s", e)
        raise StoreUnavailableError() from e
    except (RedisError, SQLAlchemyError) as e:
        logger.exception("Store error during auth gate")
        raise fallback() from e


class RequestGate:
    """Evaluates RouteAuth records against requests."""

    def __init__(
        self,
        store: SessionStore,
        codec: TokenCodec,
        permissions: PermissionSource,
        multi_device_login: bool = True,
    ):
        self.store = store
        self.codec = codec
        self.permissions = permissions
        self.multi_device_login = multi_device_login
        self._strategies = {
            AuthStrategy.PUBLIC: self._evaluate_public,
            AuthStrategy.BEARER_JWT: self._evaluate_bearer,
        }

    async def evaluate(self, request: GateRequest, route: RouteAuth) -> AuthUser | None:
        return await self._strategies[route.strategy](request, route)

    async def _evaluate_public(self, request: GateRequest, route: RouteAuth) -> AuthUser | None:
        return None

    async def _evaluate_bearer(self, request: GateRequest, route: RouteAuth) -> AuthUser | None:
        token = extract_token(request)
        if token is None:
            if route.optional:
                return None
            raise UnauthorizedError()

        # Checked on the raw string before paying for signature verification
        with store_errors(UnauthorizedError):
            blacklisted = await self.store.is_blacklisted(token)
        if blacklisted:
            logger.warning("Blacklisted token presented")
            raise InvalidLoginError()

        try:
            claims = self.codec.verify(token)
        except TokenError as e:
            if route.optional:
                return None
            logger.warning("Token verification failed: %s", type(e).__name__)
            raise InvalidLoginError() from e

        if request.is_event_stream and request.path_uid is not None:
            try:
                matches = uuid.UUID(request.path_uid) == claims.uid
            except ValueError:
                matches = False
            if not matches:
                logger.warning("Stream uid %s does not match token uid %s", request.path_uid, claims.uid)
                raise UnauthorizedError(message="Path uid does not match the logged-in account")

        user = AuthUser(claims=claims, token=token)
        await self._check_session(user)
        await self._check_permissions(user, route)
        return user

    async def _check_session(self, user: AuthUser) -> None:
        with store_errors(UnauthorizedError):
            current_pv = await self.store.get_password_version(user.uid)
        if current_pv != user.pv:
            # Password changed (or session cleared) after the token was issued
            logger.warning(
                "Password version mismatch for account %s", user.uid, extra={"account_id": str(user.uid)}
            )
            raise InvalidLoginError()

        if not self.multi_device_login:
            with store_errors(UnauthorizedError):
                current_token = await self.store.get_token(user.uid)
            if current_token != user.token:
                logger.warning(
                    "Superseded token presented for account %s", user.uid, extra={"account_id": str(user.uid)}
                )
                raise AccountLoggedInElsewhereError()

    async def _check_permissions(self, user: AuthUser, route: RouteAuth) -> None:
        if not route.permissions or user.is_admin:
            return
        with store_errors(NoPermissionError):
            granted = set(await self.permissions.get_permissions(user.uid))
        missing = [p for p in route.permissions if p not in granted]
        if missing:
            logger.warning(
                "Account %s lacks permission(s): %s",
                user.uid,
                ", ".join(missing),
                extra={"account_id": str(user.uid)},
            )
            raise NoPermissionError()
