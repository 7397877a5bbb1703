"""User service for local username/password accounts."""

from dataclasses import dataclass

import structlog
from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.exceptions import ConflictException
from authgate.core.security import get_password_hash, pwd_context, verify_password
from authgate.models.users import users
from authgate.schemas.users import UserCreate

logger = structlog.get_logger(__name__)

# Every read except credential validation goes through these columns
PUBLIC_COLUMNS = (
    users.c.id,
    users.c.username,
    users.c.email,
    users.c.role,
    users.c.created_at,
    users.c.updated_at,
)


@dataclass
class CredentialCheck:
    """Result of a username/password check."""

    valid: bool
    user: dict | None = None


class UserService:
    """Service for user operations."""

    async def create_user(self, db: AsyncSession, user_data: UserCreate) -> dict:
        """Create a new user with a hashed password."""
        query = (
            insert(users)
            .values(
                username=user_data.username,
                password=get_password_hash(user_data.password),
                email=user_data.email,
                role=user_data.role,
            )
            .returning(*PUBLIC_COLUMNS)
        )

        try:
            result = await db.execute(query)
            user = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictException("Username or email already exists") from e

        if not user:
            raise ValueError("Failed to create user")

        logger.info("user_created", user_id=user["id"], username=user_data.username)
        return dict(user)

    async def get_by_id(self, db: AsyncSession, user_id: int) -> dict | None:
        """Get user by ID."""
        query = select(*PUBLIC_COLUMNS).where(users.c.id == user_id)
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_by_username(self, db: AsyncSession, username: str) -> dict | None:
        """Get user by username."""
        query = select(*PUBLIC_COLUMNS).where(users.c.username == username)
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_all(self, db: AsyncSession) -> list[dict]:
        """Get all users."""
        result = await db.execute(select(*PUBLIC_COLUMNS).order_by(users.c.id))
        return [dict(user) for user in result.mappings().all()]

    async def validate_credentials(
        self, db: AsyncSession, username: str, password: str
    ) -> CredentialCheck:
        """
        Check a username/password pair against the stored bcrypt hash.

        Unknown usernames still pay for one hash verification so response
        timing does not reveal which usernames exist.
        """
        result = await db.execute(select(users).where(users.c.username == username))
        row = result.mappings().first()

        if row is None:
            pwd_context.dummy_verify()
            logger.info("login_rejected", username=username, reason="unknown_user")
            return CredentialCheck(valid=False)

        if not verify_password(password, row["password"]):
            logger.info("login_rejected", username=username, reason="bad_password")
            return CredentialCheck(valid=False)

        user = {key: value for key, value in row.items() if key != "password"}
        return CredentialCheck(valid=True, user=user)
