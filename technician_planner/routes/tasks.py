# technician_planner/routes/tasks.py
"""Task endpoints: create, list, complete, delete."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from technician_planner.database import get_session
from technician_planner.models import (
    MessageResponse,
    TaskCompleteRequest,
    TaskCreateRequest,
    TaskMessageResponse,
    TaskRead,
)
from technician_planner.service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_task_service(session: Session = Depends(get_session)) -> TaskService:
    return TaskService(session)


@router.post("/", status_code=201)
def create_task(
    body: TaskCreateRequest, service: TaskService = Depends(get_task_service)
) -> TaskMessageResponse:
    """Create a new Pending task."""
    task = service.create(
        customer_name=body.customer_name,
        location=body.location,
        task_type=body.task_type,
        scheduled_time=body.scheduled_time,
        notes=body.notes,
    )
    return TaskMessageResponse(
        message="Task created successfully", task=TaskRead.model_validate(task)
    )


@router.get("/")
def list_tasks(service: TaskService = Depends(get_task_service)) -> list[TaskRead]:
    """List every task. Ordering is left to the client."""
    return [TaskRead.model_validate(task) for task in service.list_all()]


@router.patch("/{task_id}")
def complete_task(
    task_id: str,
    body: TaskCompleteRequest,
    service: TaskService = Depends(get_task_service),
) -> TaskMessageResponse:
    """Mark a task Completed at the supplied ``completedAt``."""
    task = service.complete(task_id, body.completed_at)
    return TaskMessageResponse(
        message="Task updated successfully", task=TaskRead.model_validate(task)
    )


@router.delete("/{task_id}")
def delete_task(
    task_id: str, service: TaskService = Depends(get_task_service)
) -> MessageResponse:
    """Delete a Completed task."""
    service.delete(task_id)
    return MessageResponse(message="Task deleted successfully")
