"""Application (tenant) service."""

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.exceptions import ConflictException
from authgate.models.applications import applications


class ApplicationService:
    """Service for tenant application lookups."""

    async def get_by_id(self, db: AsyncSession, app_id: int) -> dict | None:
        """Get application by ID."""
        result = await db.execute(select(applications).where(applications.c.id == app_id))
        application = result.mappings().first()
        return dict(application) if application else None

    async def get_by_name(self, db: AsyncSession, app_name: str) -> dict | None:
        """Get application by name."""
        result = await db.execute(select(applications).where(applications.c.app_name == app_name))
        application = result.mappings().first()
        return dict(application) if application else None

    async def get_all(self, db: AsyncSession) -> list[dict]:
        """Get all applications."""
        result = await db.execute(select(applications).order_by(applications.c.id))
        return [dict(application) for application in result.mappings().all()]

    async def create_application(self, db: AsyncSession, app_name: str, domain: str) -> dict:
        """Register a tenant application and its Auth0 domain."""
        try:
            result = await db.execute(
                insert(applications)
                .values(app_name=app_name, domain=domain)
                .returning(applications)
            )
            application = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictException(f"Application '{app_name}' already exists") from e

        return dict(application)  # type: ignore[arg-type]
