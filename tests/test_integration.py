"""End-to-end session lifecycle against live PostgreSQL and Redis.

The schema is recreated from model metadata and the Redis database is
flushed, so point TEST_DATABASE_URL / TEST_REDIS_URL at disposable stores.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert, select

from adminpanel.core import async_session_maker, engine, redis_client
from adminpanel.main import create_app
from adminpanel.models import ROOT_ROLE_ID, ROOT_ROLE_VALUE, Account, Base, MenuType, Role, account_roles

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]

ADMIN_PASSWORD = "admin-password-123"
ALICE_PASSWORD = "alice-password-123"


@pytest_asyncio.fixture
async def live_client() -> AsyncGenerator[AsyncClient, None]:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with async_session_maker() as session:
        session.add(Role(id=ROOT_ROLE_ID, name="Administrator", value=ROOT_ROLE_VALUE))
        await session.commit()
    await redis_client.flushdb()

    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    await redis_client.flushdb()
    await redis_client.connection_pool.disconnect()
    await engine.dispose()


async def _register(client: AsyncClient, username: str, password: str) -> str:
    response = await client.post("/api/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _login(client: AsyncClient, username: str, password: str) -> dict[str, str]:
    response = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']['access_token']}"}


async def _grant_root(username: str) -> None:
    async with async_session_maker() as session:
        account_id = (await session.execute(select(Account.id).where(Account.username == username))).scalar_one()
        await session.execute(insert(account_roles).values(user_id=account_id, role_id=ROOT_ROLE_ID))
        await session.commit()


async def test_account_session_lifecycle(live_client):
    client = live_client

    await _register(client, "root", ADMIN_PASSWORD)
    await _grant_root("root")
    admin = await _login(client, "root", ADMIN_PASSWORD)

    # Admin builds a menu with one permission and a role granting it
    response = await client.post("/api/system/menus", json={"name": "System"}, headers=admin)
    assert response.status_code == 201, response.text
    group_id = response.json()["id"]
    response = await client.post(
        "/api/system/menus",
        json={
            "name": "Users",
            "parent_id": group_id,
            "type": int(MenuType.MENU),
            "permission": "system:user:list",
        },
        headers=admin,
    )
    assert response.status_code == 201, response.text
    menu_id = response.json()["id"]
    response = await client.post(
        "/api/system/roles",
        json={"name": "Operators", "value": "ops", "menu_ids": [menu_id]},
        headers=admin,
    )
    assert response.status_code == 201, response.text
    role_id = response.json()["id"]

    # Alice starts without permissions
    alice_id = await _register(client, "alice", ALICE_PASSWORD)
    alice = await _login(client, "alice", ALICE_PASSWORD)
    assert (await client.get("/api/account/profile", headers=alice)).status_code == 200
    response = await client.get("/api/system/users", headers=alice)
    assert response.status_code == 403
    assert response.json()["code"] == 1102

    # Granting the role refreshes her cached permissions immediately
    response = await client.post(f"/api/system/users/{alice_id}/roles", json={"role_ids": [role_id]}, headers=admin)
    assert response.status_code == 200, response.text
    assert (await client.get("/api/system/users", headers=alice)).status_code == 200
    response = await client.get("/api/account/permissions", headers=alice)
    assert response.json()["permissions"] == ["system:user:list"]

    # The root role stays put
    response = await client.delete(f"/api/system/roles/{ROOT_ROLE_ID}", headers=admin)
    assert response.json()["code"] == 1009
    # Ops role is still held by alice
    response = await client.delete(f"/api/system/roles/{role_id}", headers=admin)
    assert response.json()["code"] == 1008

    # A password change invalidates every token issued before it
    response = await client.post(
        "/api/account/password",
        json={"old_password": ALICE_PASSWORD, "new_password": "alice-new-password"},
        headers=alice,
    )
    assert response.status_code == 200, response.text
    response = await client.get("/api/account/profile", headers=alice)
    assert response.status_code == 401
    assert response.json()["code"] == 1101

    # Logout blacklists the token
    alice = await _login(client, "alice", "alice-new-password")
    assert (await client.post("/api/auth/logout", headers=alice)).status_code == 200
    response = await client.get("/api/account/profile", headers=alice)
    assert response.status_code == 401
    assert response.json()["code"] == 1101

    # Wrong password and unknown user look the same
    bad_password = await client.post("/api/auth/login", json={"username": "alice", "password": "nope-nope"})
    unknown_user = await client.post("/api/auth/login", json={"username": "nobody", "password": "nope-nope"})
    assert bad_password.status_code == unknown_user.status_code == 401
    assert bad_password.json() == unknown_user.json()


async def test_health_reports_both_stores(live_client):
    response = await live_client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"
    assert response.json()["redis"] == "connected"
