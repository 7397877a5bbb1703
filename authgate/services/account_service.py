"""Account service: Auth0 identity lookup, resolution and removal."""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.exceptions import BadRequestException, ConflictException, NotFoundException
from authgate.models.accounts import accounts
from authgate.models.devices import device_accounts, devices
from authgate.schemas.accounts import AccountData, AccountUpdate

logger = structlog.get_logger(__name__)

# Columns refreshed from the identity provider on every verification
MUTABLE_FIELDS = (
    "user_id",
    "name",
    "nickname",
    "email",
    "email_verified",
    "picture",
    "app_id",
    "login_type",
)


@dataclass
class UnbindResult:
    """Outcome of unbinding a device and deleting its account."""

    success: bool
    reason: str | None = None
    device_links_deleted: int = 0
    accounts_deleted: int = 0


class AccountService:
    """Service for account operations."""

    async def find_by_auth0_sub(self, db: AsyncSession, auth0_sub: str) -> dict | None:
        """Get the first account for an Auth0 subject, across tenants."""
        query = (
            select(accounts)
            .where(accounts.c.auth0_sub == auth0_sub)
            .order_by(accounts.c.id)
            .limit(1)
        )
        result = await db.execute(query)
        account = result.mappings().first()
        return dict(account) if account else None

    async def find_by_id(self, db: AsyncSession, account_id: int) -> dict | None:
        """Get account by internal ID."""
        query = select(accounts).where(accounts.c.id == account_id)
        result = await db.execute(query)
        account = result.mappings().first()
        return dict(account) if account else None

    async def find_by_auth0_sub_and_app_id(
        self, db: AsyncSession, auth0_sub: str, app_id: int
    ) -> dict | None:
        """Get the account of an Auth0 subject within one tenant."""
        query = select(accounts).where(
            and_(accounts.c.auth0_sub == auth0_sub, accounts.c.app_id == app_id)
        )
        result = await db.execute(query)
        account = result.mappings().first()
        return dict(account) if account else None

    async def _lookup(self, db: AsyncSession, auth0_sub: str, app_id: int | None) -> dict | None:
        if app_id is not None:
            return await self.find_by_auth0_sub_and_app_id(db, auth0_sub, app_id)
        return await self.find_by_auth0_sub(db, auth0_sub)

    async def create_account(self, db: AsyncSession, data: AccountData) -> dict:
        """
        Create a new account.

        Raises:
            ConflictException: If the account already exists for the tenant
        """
        now = datetime.now(UTC)
        query = (
            insert(accounts)
            .values(**data.model_dump(exclude_none=True), created_at=now, updated_at=now)
            .returning(accounts)
        )

        try:
            result = await db.execute(query)
            account = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictException(
                f"Account for '{data.auth0_sub}' already exists in app {data.app_id}"
            ) from e

        if not account:
            raise ValueError("Failed to create account")

        return dict(account)

    async def update_account(self, db: AsyncSession, data: AccountUpdate) -> dict:
        """
        Overwrite the mutable profile columns of an account.

        Fields left unset in ``data`` keep their stored value, so the write
        always carries the merged previous and new profile.
        """
        if not data.id:
            raise BadRequestException("Account ID is required for update")

        existing = await self.find_by_id(db, data.id)
        if not existing:
            raise NotFoundException(f"Account {data.id} not found")

        incoming = data.model_dump()
        values = {
            field: incoming[field] if incoming[field] is not None else existing[field]
            for field in MUTABLE_FIELDS
        }
        values["updated_at"] = datetime.now(UTC)

        query = (
            update(accounts).where(accounts.c.id == data.id).values(**values).returning(accounts)
        )
        result = await db.execute(query)
        account = result.mappings().first()
        await db.commit()

        if not account:
            raise NotFoundException(f"Account {data.id} not found")

        return dict(account)

    async def resolve_account(self, db: AsyncSession, data: AccountData) -> dict:
        """
        Find the account for an identity and refresh it, or create it.

        Lookup is tenant scoped when ``data.app_id`` is set, global on
        ``auth0_sub`` otherwise. A concurrent request that inserts the same
        identity first makes our insert hit the unique constraint; the row is
        then re-read and updated instead.
        """
        existing = await self._lookup(db, data.auth0_sub, data.app_id)
        if existing:
            return await self.update_account(
                db, AccountUpdate(id=existing["id"], **data.model_dump())
            )

        try:
            account = await self.create_account(db, data)
        except ConflictException:
            existing = await self._lookup(db, data.auth0_sub, data.app_id)
            if not existing:
                raise
            logger.info(
                "account_conflict_recovered",
                account_id=existing["id"],
                auth0_sub=data.auth0_sub,
                app_id=data.app_id,
            )
            return await self.update_account(
                db, AccountUpdate(id=existing["id"], **data.model_dump())
            )

        logger.info(
            "account_created",
            account_id=account["id"],
            auth0_sub=data.auth0_sub,
            app_id=data.app_id,
        )
        return account

    async def link_account_to_user(self, db: AsyncSession, account_id: int, user_id: int) -> bool:
        """Attach an account to a local user."""
        query = (
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(user_id=user_id, updated_at=datetime.now(UTC))
        )
        result = await db.execute(query)
        await db.commit()
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def delete_account_by_id(self, db: AsyncSession, account_id: int) -> bool:
        """Delete an account and its device links (hard delete)."""
        counts = await self._delete_with_links(db, account_id)
        return counts[1] > 0

    async def unbind_device_and_delete_account(
        self,
        db: AsyncSession,
        auth0_sub: str,
        device_number: str | None = None,
        app_id: int | None = None,
    ) -> UnbindResult:
        """
        Remove every device link of an account, then the account itself.

        When ``device_number`` is given the device must exist and be linked to
        the account. Missing records are reported in the result rather than
        raised. Both deletes run in one transaction.
        """
        account = await self._lookup(db, auth0_sub, app_id)
        if not account:
            return UnbindResult(success=False, reason="account not found")

        if device_number is not None:
            result = await db.execute(select(devices).where(devices.c.device_number == device_number))
            device = result.mappings().first()
            if not device:
                return UnbindResult(success=False, reason="device not found")

            result = await db.execute(
                select(device_accounts).where(
                    and_(
                        device_accounts.c.account_id == account["id"],
                        device_accounts.c.device_id == device["id"],
                    )
                )
            )
            if not result.first():
                return UnbindResult(success=False, reason="no relation")

        links_deleted, accounts_deleted = await self._delete_with_links(db, account["id"])

        logger.info(
            "account_deleted",
            account_id=account["id"],
            auth0_sub=auth0_sub,
            app_id=app_id,
            device_links_deleted=links_deleted,
        )
        return UnbindResult(
            success=True,
            device_links_deleted=links_deleted,
            accounts_deleted=accounts_deleted,
        )

    async def _delete_with_links(self, db: AsyncSession, account_id: int) -> tuple[int, int]:
        try:
            links = await db.execute(
                delete(device_accounts).where(device_accounts.c.account_id == account_id)
            )
            deleted = await db.execute(delete(accounts).where(accounts.c.id == account_id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("account_delete_failed", account_id=account_id, error=str(e))
            raise

        return links.rowcount, deleted.rowcount  # type: ignore[attr-defined]
