"""Task service for the demo task entity."""

import math
from datetime import UTC, datetime

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.models.tasks import tasks
from authgate.schemas.tasks import TaskCreate, TaskUpdate

MAX_PAGE_SIZE = 100


class TaskService:
    """Service for task operations."""

    async def list_tasks(
        self,
        db: AsyncSession,
        page_num: int = 1,
        page_size: int = 10,
        status: str | None = None,
    ) -> dict:
        """
        List tasks one page at a time.

        Args:
            db: Database session
            page_num: 1-based page number, clamped to at least 1
            page_size: Page size, clamped to 1..100
            status: Optional status filter

        Returns:
            Page with ``list``, ``total``, ``pageNum``, ``pageSize`` and ``totalPages``
        """
        page_num = max(1, page_num)
        page_size = min(MAX_PAGE_SIZE, max(1, page_size))

        query = select(tasks)
        count_query = select(func.count()).select_from(tasks)
        if status:
            query = query.where(tasks.c.status == status)
            count_query = count_query.where(tasks.c.status == status)

        query = query.order_by(tasks.c.id).limit(page_size).offset((page_num - 1) * page_size)

        result = await db.execute(query)
        items = [dict(task) for task in result.mappings().all()]
        total = (await db.execute(count_query)).scalar_one()

        return {
            "list": items,
            "total": total,
            "pageNum": page_num,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size),
        }

    async def get_task(self, db: AsyncSession, task_id: int) -> dict | None:
        """Get task by ID."""
        result = await db.execute(select(tasks).where(tasks.c.id == task_id))
        task = result.mappings().first()
        return dict(task) if task else None

    async def create_task(self, db: AsyncSession, task_data: TaskCreate) -> dict:
        """Create a new task."""
        result = await db.execute(
            insert(tasks).values(**task_data.model_dump()).returning(tasks)
        )
        task = result.mappings().first()
        await db.commit()
        return dict(task)  # type: ignore[arg-type]

    async def update_task(self, db: AsyncSession, task_id: int, task_data: TaskUpdate) -> dict | None:
        """Update the supplied fields of a task."""
        update_data = task_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return await self.get_task(db, task_id)

        update_data["updated_at"] = datetime.now(UTC)

        result = await db.execute(
            update(tasks).where(tasks.c.id == task_id).values(**update_data).returning(tasks)
        )
        task = result.mappings().first()
        await db.commit()
        return dict(task) if task else None

    async def delete_task(self, db: AsyncSession, task_id: int) -> bool:
        """Delete a task."""
        result = await db.execute(delete(tasks).where(tasks.c.id == task_id))
        await db.commit()
        return result.rowcount > 0  # type: ignore[attr-defined]
