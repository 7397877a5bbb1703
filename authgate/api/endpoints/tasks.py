"""Task endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from authgate.core.exceptions import NotFoundException
from authgate.core.responses import success_response
from authgate.dependencies import CurrentPrincipal, DatabaseSession
from authgate.schemas.common import Envelope, Page
from authgate.schemas.tasks import TaskCreate, TaskResponse, TaskStatus, TaskUpdate
from authgate.services.task_service import MAX_PAGE_SIZE, TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=Envelope[Page[TaskResponse]])
async def list_tasks(
    db: DatabaseSession,
    _principal: CurrentPrincipal,
    page_num: Annotated[int, Query(alias="pageNum", ge=1)] = 1,
    page_size: Annotated[int, Query(alias="pageSize", ge=1, le=MAX_PAGE_SIZE)] = 10,
    status: TaskStatus | None = None,
) -> JSONResponse:
    """List tasks one page at a time, optionally filtered by status."""
    page = await TaskService().list_tasks(db, page_num, page_size, status)
    page["list"] = [TaskResponse.model_validate(task) for task in page["list"]]
    return success_response(page)


@router.get("/{task_id}", response_model=Envelope[TaskResponse])
async def get_task(task_id: int, db: DatabaseSession, _principal: CurrentPrincipal) -> JSONResponse:
    """Get a task by ID."""
    task = await TaskService().get_task(db, task_id)
    if not task:
        raise NotFoundException("Task not found")
    return success_response(TaskResponse.model_validate(task))


@router.post("", response_model=Envelope[TaskResponse])
async def create_task(
    task_data: TaskCreate,
    db: DatabaseSession,
    _principal: CurrentPrincipal,
) -> JSONResponse:
    """Create a task."""
    task = await TaskService().create_task(db, task_data)
    return success_response(TaskResponse.model_validate(task), message="task created")


@router.patch("/{task_id}", response_model=Envelope[TaskResponse])
async def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: DatabaseSession,
    _principal: CurrentPrincipal,
) -> JSONResponse:
    """Update a task."""
    task = await TaskService().update_task(db, task_id, task_data)
    if not task:
        raise NotFoundException("Task not found")
    return success_response(TaskResponse.model_validate(task))


@router.delete("/{task_id}")
async def delete_task(task_id: int, db: DatabaseSession, _principal: CurrentPrincipal) -> JSONResponse:
    """Delete a task."""
    if not await TaskService().delete_task(db, task_id):
        raise NotFoundException("Task not found")
    return success_response({"id": task_id}, message="task deleted")
