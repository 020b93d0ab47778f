"""Tests for account management side effects on the session store."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from adminpanel.core.exceptions import BusinessError, ErrorCode
from adminpanel.models import ROOT_ROLE_ID, Account, AccountStatus, Role
from adminpanel.services.account import AccountService
from adminpanel.services.auth import hash_password

pytestmark = pytest.mark.asyncio

PASSWORD_HASH = hash_password("old-password")


@pytest.fixture
def account():
    return Account(
        id=uuid.uuid4(),
        username="alice",
        password_hash=PASSWORD_HASH,
        status=AccountStatus.ENABLED,
        roles=[],
    )


@pytest.fixture
def db(account):
    session = AsyncMock()
    session.add = MagicMock()
    session.get.return_value = account
    return session


@pytest.fixture
def resolver():
    resolver = MagicMock()
    resolver.refresh_one = AsyncMock(return_value=True)
    return resolver


@pytest.fixture
def service(db, store, resolver):
    return AccountService(db, store, resolver)


async def test_get_missing_account(service, db):
    db.get.return_value = None
    with pytest.raises(BusinessError) as exc_info:
        await service.get(uuid.uuid4())
    assert exc_info.value.error_code == ErrorCode.USER_NOT_FOUND


async def test_register_existing_username(service, db):
    result = MagicMock()
    result.scalar_one_or_none.return_value = uuid.uuid4()
    db.execute.return_value = result

    with pytest.raises(BusinessError) as exc_info:
        await service.register("alice", "password123")
    assert exc_info.value.code == 1001
    db.add.assert_not_called()


async def test_change_password_with_wrong_old_password(service, store, account):
    await store.set_password_version(account.id, 1)

    with pytest.raises(BusinessError) as exc_info:
        await service.change_password(account.id, "not-it", "new-password")
    assert exc_info.value.error_code == ErrorCode.PASSWORD_MISMATCH
    assert await store.get_password_version(account.id) == 1


async def test_change_password_bumps_session_version(service, store, db, account):
    await store.set_password_version(account.id, 1)

    await service.change_password(account.id, "old-password", "new-password")

    assert account.password_hash != PASSWORD_HASH
    db.commit.assert_awaited()
    assert await store.get_password_version(account.id) == 2


async def test_change_password_without_session_does_not_create_one(service, store, account):
    await service.force_update_password(account.id, "new-password")
    assert await store.get_password_version(account.id) is None


async def test_disable_clears_session(service, store, account):
    await store.set_token(account.id, "tok", 60)
    await store.set_password_version(account.id, 1)

    await service.set_status(account.id, AccountStatus.DISABLED)

    assert account.status == AccountStatus.DISABLED
    assert await store.get_token(account.id) is None
    assert await store.get_password_version(account.id) is None


async def test_enable_keeps_session(service, store, account):
    await store.set_token(account.id, "tok", 60)
    await service.set_status(account.id, AccountStatus.ENABLED)
    assert await store.get_token(account.id) == "tok"


async def test_assign_roles_refreshes_account(service, db, resolver, account):
    role = Role(id=uuid.uuid4(), name="Ops", value="ops")
    result = MagicMock()
    result.scalars.return_value.all.return_value = [role]
    db.execute.return_value = result

    await service.assign_roles(account.id, [role.id])

    assert account.roles == [role]
    resolver.refresh_one.assert_awaited_once_with(account.id)


async def test_assign_unknown_role(service, db, resolver, account):
    result = MagicMock()
    result.scalars.return_value.all.return_value = []
    db.execute.return_value = result

    with pytest.raises(BusinessError) as exc_info:
        await service.assign_roles(account.id, [uuid.uuid4()])
    assert exc_info.value.error_code == ErrorCode.ROLE_NOT_FOUND
    resolver.refresh_one.assert_not_awaited()


async def test_root_role_holder_cannot_be_deleted(service, db, account):
    account.roles = [Role(id=ROOT_ROLE_ID, name="Administrator", value="admin")]

    with pytest.raises(BusinessError) as exc_info:
        await service.delete(account.id)
    assert exc_info.value.code == 1009
    db.delete.assert_not_awaited()


async def test_delete_clears_session(service, store, db, account):
    await store.set_token(account.id, "tok", 60)

    await service.delete(account.id)

    db.delete.assert_awaited_once_with(account)
    assert await store.get_token(account.id) is None
