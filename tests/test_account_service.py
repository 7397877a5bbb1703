"""Tests for account resolution and removal."""

import pytest
from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Delete

from authgate.core.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)
from authgate.models.accounts import accounts
from authgate.models.applications import applications
from authgate.models.devices import device_accounts, devices
from authgate.schemas.accounts import AccountData, AccountUpdate
from authgate.services.account_service import AccountService
from authgate.services.device_service import DeviceService


async def _count_accounts(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(accounts))).scalar_one()


@pytest.mark.asyncio
async def test_resolve_account_creates_then_updates(db_session: AsyncSession, picchat_app: dict) -> None:
    """Resolving the same identity twice keeps one row and refreshes its profile."""
    service = AccountService()
    data = AccountData(auth0_sub="auth0|abc", name="Ann", email="ann@example.com", app_id=7)

    first = await service.resolve_account(db_session, data)
    second = await service.resolve_account(
        db_session, AccountData(auth0_sub="auth0|abc", name="Ann B", app_id=7)
    )

    assert second["id"] == first["id"]
    assert second["name"] == "Ann B"
    # Omitted fields keep their stored value
    assert second["email"] == "ann@example.com"
    assert await _count_accounts(db_session) == 1


@pytest.mark.asyncio
async def test_resolve_account_is_tenant_scoped(db_session: AsyncSession, picchat_app: dict) -> None:
    """The same subject gets one account per tenant."""
    await db_session.execute(
        insert(applications).values(id=8, app_name="AIMetaAid", domain="dev-aimetaaid.au.auth0.com")
    )
    await db_session.commit()
    service = AccountService()

    in_picchat = await service.resolve_account(db_session, AccountData(auth0_sub="auth0|x", app_id=7))
    in_aimeta = await service.resolve_account(db_session, AccountData(auth0_sub="auth0|x", app_id=8))

    assert in_picchat["id"] != in_aimeta["id"]
    assert await _count_accounts(db_session) == 2


@pytest.mark.asyncio
async def test_create_account_conflict(db_session: AsyncSession, picchat_app: dict) -> None:
    """A duplicate (auth0_sub, app_id) is rejected."""
    service = AccountService()
    data = AccountData(auth0_sub="auth0|dup", app_id=7)
    await service.create_account(db_session, data)

    with pytest.raises(ConflictException):
        await service.create_account(db_session, data)


@pytest.mark.asyncio
async def test_resolve_account_recovers_from_concurrent_insert(
    db_session: AsyncSession, picchat_app: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A competitor committing first turns our insert into an update."""
    service = AccountService()
    competitor = await service.create_account(
        db_session, AccountData(auth0_sub="auth0|race", name="First", app_id=7)
    )

    real_lookup = service._lookup
    calls = {"count": 0}

    async def stale_first_lookup(db, auth0_sub, app_id):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return await real_lookup(db, auth0_sub, app_id)

    monkeypatch.setattr(service, "_lookup", stale_first_lookup)

    account = await service.resolve_account(
        db_session, AccountData(auth0_sub="auth0|race", name="Second", app_id=7)
    )

    assert account["id"] == competitor["id"]
    assert account["name"] == "Second"
    assert calls["count"] == 2
    assert await _count_accounts(db_session) == 1


@pytest.mark.asyncio
async def test_update_account_requires_existing_row(db_session: AsyncSession) -> None:
    """Updating without an ID or for an unknown ID is reported."""
    service = AccountService()

    with pytest.raises(BadRequestException):
        await service.update_account(db_session, AccountUpdate(id=0, auth0_sub="auth0|none"))
    with pytest.raises(NotFoundException):
        await service.update_account(db_session, AccountUpdate(id=999, auth0_sub="auth0|none"))


@pytest.mark.asyncio
async def test_unbind_reports_missing_records(db_session: AsyncSession, test_account: dict) -> None:
    """Missing account, device or link are reported as reasons."""
    service = AccountService()

    missing_account = await service.unbind_device_and_delete_account(db_session, "auth0|nobody")
    missing_device = await service.unbind_device_and_delete_account(
        db_session, "auth0|u1", device_number="ghost", app_id=7
    )

    await DeviceService().create_or_update(db_session, "dev-unlinked")
    no_relation = await service.unbind_device_and_delete_account(
        db_session, "auth0|u1", device_number="dev-unlinked", app_id=7
    )

    assert (missing_account.success, missing_account.reason) == (False, "account not found")
    assert (missing_device.success, missing_device.reason) == (False, "device not found")
    assert (no_relation.success, no_relation.reason) == (False, "no relation")
    assert await service.find_by_id(db_session, test_account["id"]) is not None


@pytest.mark.asyncio
async def test_unbind_deletes_links_and_account(db_session: AsyncSession, test_account: dict) -> None:
    """Every device link goes together with the account."""
    device_service = DeviceService()
    for number in ("dev-001", "dev-002"):
        device = await device_service.create_or_update(db_session, number)
        await device_service.link_to_account(db_session, device["id"], test_account["id"])

    result = await AccountService().unbind_device_and_delete_account(
        db_session, "auth0|u1", device_number="dev-001", app_id=7
    )

    assert result.success is True
    assert result.device_links_deleted == 2
    assert result.accounts_deleted == 1
    assert await AccountService().find_by_id(db_session, test_account["id"]) is None
    # Devices themselves are kept
    assert await device_service.find_by_number(db_session, "dev-002") is not None


@pytest.mark.asyncio
async def test_unbind_rolls_back_when_account_delete_fails(
    db_session: AsyncSession, test_account: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A failure on the account delete keeps the device links."""
    device_service = DeviceService()
    device = await device_service.create_or_update(db_session, "dev-001")
    await device_service.link_to_account(db_session, device["id"], test_account["id"])

    real_execute = db_session.execute

    async def failing_execute(statement, *args, **kwargs):
        if isinstance(statement, Delete) and statement.table is accounts:
            raise SQLAlchemyError("account delete failed")
        return await real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", failing_execute)

    with pytest.raises(SQLAlchemyError):
        await AccountService().unbind_device_and_delete_account(db_session, "auth0|u1", app_id=7)

    monkeypatch.undo()

    links = await db_session.execute(
        select(device_accounts).where(device_accounts.c.account_id == test_account["id"])
    )
    assert len(links.all()) == 1
    remaining = await db_session.execute(select(devices.c.id))
    assert len(remaining.all()) == 1
    assert await AccountService().find_by_id(db_session, test_account["id"]) is not None
