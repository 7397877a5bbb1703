"""Device service: device records and device/account links."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.models.accounts import accounts
from authgate.models.devices import device_accounts, devices

logger = structlog.get_logger(__name__)


def _supplied(value: object) -> bool:
    return value is not None and value != ""


class DeviceService:
    """Service for device operations."""

    async def find_by_number(self, db: AsyncSession, device_number: str) -> dict | None:
        """Get device by its device number."""
        query = select(devices).where(devices.c.device_number == device_number)
        result = await db.execute(query)
        device = result.mappings().first()
        return dict(device) if device else None

    async def find_by_id(self, db: AsyncSession, device_id: int) -> dict | None:
        """Get device by internal ID."""
        query = select(devices).where(devices.c.id == device_id)
        result = await db.execute(query)
        device = result.mappings().first()
        return dict(device) if device else None

    async def create_or_update(
        self,
        db: AsyncSession,
        device_number: str,
        phone_model: str | None = None,
        country_code: str | None = None,
        version: str | None = None,
        login_type: int | None = None,
    ) -> dict:
        """
        Create a device, or merge the supplied fields into an existing one.

        Only fields that are supplied are written; an absent field never
        clears stored data.

        Args:
            db: Database session
            device_number: Stable client device identifier
            phone_model: Optional phone model
            country_code: Optional country code
            version: Optional client version
            login_type: Optional login provider (1 = Apple, 2 = Google)

        Returns:
            Device record
        """
        supplied = {
            key: value
            for key, value in {
                "phone_model": phone_model,
                "country_code": country_code,
                "version": version,
                "login_type": login_type,
            }.items()
            if _supplied(value)
        }

        device = await self.find_by_number(db, device_number)

        if device is None:
            now = datetime.now(UTC)
            try:
                result = await db.execute(
                    insert(devices)
                    .values(device_number=device_number, created_at=now, updated_at=now, **supplied)
                    .returning(devices)
                )
                created = result.mappings().first()
                await db.commit()
            except IntegrityError:
                await db.rollback()
                device = await self.find_by_number(db, device_number)
                if device is None:
                    raise
                logger.info("device_conflict_recovered", device_number=device_number)
            else:
                logger.info("device_created", device_number=device_number)
                return dict(created)  # type: ignore[arg-type]

        if not supplied:
            return device

        query = (
            update(devices)
            .where(devices.c.id == device["id"])
            .values(**supplied, updated_at=datetime.now(UTC))
            .returning(devices)
        )
        result = await db.execute(query)
        updated = result.mappings().first()
        await db.commit()
        return dict(updated) if updated else device

    async def update_login_type(self, db: AsyncSession, device_id: int, login_type: int) -> bool:
        """Set the login provider of a device."""
        query = (
            update(devices)
            .where(devices.c.id == device_id)
            .values(login_type=login_type, updated_at=datetime.now(UTC))
        )
        result = await db.execute(query)
        await db.commit()
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def _find_link(self, db: AsyncSession, device_id: int, account_id: int) -> dict | None:
        query = select(device_accounts).where(
            and_(
                device_accounts.c.device_id == device_id,
                device_accounts.c.account_id == account_id,
            )
        )
        result = await db.execute(query)
        link = result.mappings().first()
        return dict(link) if link else None

    async def _refresh_link(self, db: AsyncSession, device_id: int, account_id: int) -> dict:
        now = datetime.now(UTC)
        query = (
            update(device_accounts)
            .where(
                and_(
                    device_accounts.c.device_id == device_id,
                    device_accounts.c.account_id == account_id,
                )
            )
            .values(is_active=True, last_login=now, updated_at=now)
            .returning(device_accounts)
        )
        result = await db.execute(query)
        link = result.mappings().first()
        await db.commit()
        return dict(link)  # type: ignore[arg-type]

    async def link_to_account(self, db: AsyncSession, device_id: int, account_id: int) -> dict:
        """
        Link a device to an account.

        An existing link is reactivated and its ``last_login`` refreshed;
        otherwise a new active link is inserted.
        """
        if await self._find_link(db, device_id, account_id):
            return await self._refresh_link(db, device_id, account_id)

        now = datetime.now(UTC)
        try:
            result = await db.execute(
                insert(device_accounts)
                .values(
                    device_id=device_id,
                    account_id=account_id,
                    is_active=True,
                    last_login=now,
                    created_at=now,
                    updated_at=now,
                )
                .returning(device_accounts)
            )
            link = result.mappings().first()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            return await self._refresh_link(db, device_id, account_id)

        logger.info("device_linked", device_id=device_id, account_id=account_id)
        return dict(link)  # type: ignore[arg-type]

    async def devices_for_account(self, db: AsyncSession, account_id: int) -> list[dict]:
        """Get the devices linked to an account, with link metadata."""
        query = (
            select(devices, device_accounts.c.last_login, device_accounts.c.is_active)
            .select_from(device_accounts.join(devices, device_accounts.c.device_id == devices.c.id))
            .where(device_accounts.c.account_id == account_id)
            .order_by(device_accounts.c.last_login.desc())
        )
        result = await db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    async def accounts_for_device(self, db: AsyncSession, device_number: str) -> list[dict]:
        """Get the accounts linked to a device, with link metadata."""
        device = await self.find_by_number(db, device_number)
        if not device:
            return []

        query = (
            select(accounts, device_accounts.c.last_login, device_accounts.c.is_active)
            .select_from(
                device_accounts.join(accounts, device_accounts.c.account_id == accounts.c.id)
            )
            .where(device_accounts.c.device_id == device["id"])
            .order_by(device_accounts.c.last_login.desc())
        )
        result = await db.execute(query)
        return [dict(row) for row in result.mappings().all()]
