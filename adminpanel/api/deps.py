"""FastAPI dependencies wiring services and the request gate."""

from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adminpanel.core import get_db, get_redis
from adminpanel.core.config import Settings, get_settings
from adminpanel.core.database import async_session_maker
from adminpanel.services.account import AccountService
from adminpanel.services.auth import AuthService
from adminpanel.services.gate import AuthUser, GateRequest, RequestGate, RouteAuth
from adminpanel.services.menu import MenuService
from adminpanel.services.permission import PermissionResolver
from adminpanel.services.role import RoleService
from adminpanel.services.session_store import SessionStore
from adminpanel.services.tokens import TokenCodec, get_token_codec


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Dependency to get the session factory used for out-of-request queries."""
    return async_session_maker


def get_session_store(
    client: aioredis.Redis = Depends(get_redis),
    app_settings: Settings = Depends(get_settings),
) -> SessionStore:
    return SessionStore(client, prefix=app_settings.redis_key_prefix)


def get_permission_resolver(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
    store: SessionStore = Depends(get_session_store),
    app_settings: Settings = Depends(get_settings),
) -> PermissionResolver:
    return PermissionResolver(
        session_maker,
        store,
        concurrency=app_settings.permission_refresh_concurrency,
    )


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    codec: TokenCodec = Depends(get_token_codec),
    resolver: PermissionResolver = Depends(get_permission_resolver),
    app_settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(
        db,
        store,
        codec,
        resolver,
        multi_device_login=app_settings.multi_device_login,
    )


def get_account_service(
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    resolver: PermissionResolver = Depends(get_permission_resolver),
) -> AccountService:
    return AccountService(db, store, resolver)


def get_role_service(
    db: AsyncSession = Depends(get_db),
    resolver: PermissionResolver = Depends(get_permission_resolver),
) -> RoleService:
    return RoleService(db, resolver)


def get_menu_service(
    db: AsyncSession = Depends(get_db),
    resolver: PermissionResolver = Depends(get_permission_resolver),
) -> MenuService:
    return MenuService(db, resolver)


def to_gate_request(request: Request) -> GateRequest:
    return GateRequest(
        authorization=request.headers.get("Authorization"),
        accept=request.headers.get("Accept"),
        query_token=request.query_params.get("token"),
        path_uid=request.path_params.get("uid"),
    )


def gate(route: RouteAuth) -> Callable[..., Awaitable[AuthUser | None]]:
    """Build a dependency that runs the request gate for ``route``.

    Handlers receive the resolved identity as a parameter; public and
    anonymous-optional routes receive None.
    """

    async def dependency(
        request: Request,
        store: SessionStore = Depends(get_session_store),
        codec: TokenCodec = Depends(get_token_codec),
        auth_service: AuthService = Depends(get_auth_service),
        app_settings: Settings = Depends(get_settings),
    ) -> AuthUser | None:
        request_gate = RequestGate(
            store,
            codec,
            auth_service,
            multi_device_login=app_settings.multi_device_login,
        )
        return await request_gate.evaluate(to_gate_request(request), route)

    return dependency
