# technician_planner/service.py
"""Task lifecycle rules: creation validation, completion, guarded deletion."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from technician_planner.errors import (
    NotFoundError,
    PreconditionError,
    ServerError,
    ValidationError,
)
from technician_planner.models import Task, TaskStatus, TaskType, to_utc, utc_now

logger = logging.getLogger(__name__)

_datetime_adapter = TypeAdapter(datetime)


def _require_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def parse_task_type(value: Any) -> TaskType:
    """Resolve a task type from its wire value (e.g. ``"Repair"``).

    Raises:
        ValidationError: If *value* is not one of the known task types.
    """
    if isinstance(value, TaskType):
        return value
    try:
        return TaskType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in TaskType)
        raise ValidationError(f"taskType must be one of: {allowed}") from None


def parse_timestamp(value: Any, label: str) -> datetime:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime.

    Raises:
        ValidationError: If *value* is missing or cannot be parsed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required")
    try:
        if isinstance(value, datetime):
            return to_utc(value)
        return to_utc(_datetime_adapter.validate_python(value))
    except (PydanticValidationError, OverflowError):
        # Offsets that push the value past datetime.min/max cannot be moved to UTC.
        raise ValidationError(f"{label} is not a valid ISO-8601 timestamp") from None


class TaskService:
    """Enforces the task lifecycle on top of a database session.

    Tasks are created Pending, move to Completed through :meth:`complete`,
    and may only be removed once Completed. Every storage failure is
    raised to the caller as :class:`ServerError`.

    Args:
        session: Open SQLModel session; the service commits its own writes.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @contextmanager
    def _persistence(self, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception("Failed to %s", action)
            raise ServerError(f"Failed to {action}") from exc

    def create(
        self,
        customer_name: Any,
        location: Any,
        task_type: Any,
        scheduled_time: Any,
        notes: Optional[str] = None,
    ) -> Task:
        """Validate input and persist a new Pending task.

        Raises:
            ValidationError: On empty customer name or location, unknown
                task type, or a missing/unparseable scheduled time.
            ServerError: If the insert fails.
        """
        task = Task(
            customer_name=_require_text(customer_name, "customerName"),
            location=_require_text(location, "location"),
            task_type=parse_task_type(task_type),
            scheduled_time=parse_timestamp(scheduled_time, "scheduledTime"),
            notes=notes.strip() if isinstance(notes, str) and notes.strip() else None,
            status=TaskStatus.pending,
            completed_at=None,
        )
        with self._persistence("create task"):
            self._session.add(task)
            self._session.commit()
            self._session.refresh(task)
        logger.info("Task %s created for %s", task.id, task.customer_name)
        return task

    def list_all(self) -> list[Task]:
        """Return every task, in storage order."""
        with self._persistence("fetch tasks"):
            return list(self._session.exec(select(Task)).all())

    def get(self, task_id: str) -> Task:
        with self._persistence("fetch task"):
            task = self._session.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def complete(self, task_id: str, completed_at: Any) -> Task:
        """Mark a task Completed at the caller-supplied time.

        Completing an already Completed task overwrites its timestamp.

        Raises:
            ValidationError: If *completed_at* is missing or unparseable.
            NotFoundError: If no task has *task_id*.
            ServerError: If the update fails.
        """
        completed = parse_timestamp(completed_at, "completedAt")
        statement = (
            update(Task)
            .where(Task.id == task_id)
            .values(
                status=TaskStatus.completed,
                completed_at=completed,
                updated_at=utc_now(),
            )
        )
        with self._persistence("update task"):
            result = self._session.exec(statement)
            self._session.commit()
        if result.rowcount == 0:
            raise NotFoundError("Task not found")
        logger.info("Task %s completed at %s", task_id, completed.isoformat())
        return self.get(task_id)

    def delete(self, task_id: str) -> None:
        """Permanently remove a Completed task.

        The status check and the delete are one conditional statement, so a
        task cannot be deleted while it is still Pending.

        Raises:
            NotFoundError: If no task has *task_id*.
            PreconditionError: If the task is not Completed.
            ServerError: If the delete fails.
        """
        statement = delete(Task).where(
            Task.id == task_id,
            Task.status == TaskStatus.completed,
        )
        with self._persistence("delete task"):
            result = self._session.exec(statement)
            self._session.commit()
        if result.rowcount:
            logger.info("Task %s deleted", task_id)
            return

        self.get(task_id)
        logger.warning("Refused to delete pending task %s", task_id)
        raise PreconditionError("Only completed tasks can be deleted")
