# technician_planner/cache.py
"""Client-side task list, kept in display order.

The cache only changes after the server confirms an operation. A failed
request leaves it exactly as it was and the error propagates to the caller.
"""

import logging
from datetime import datetime
from typing import Optional

from technician_planner.client import BulkDeleteResult, TaskClient
from technician_planner.models import TaskRead, TaskStatus, to_utc, utc_now
from technician_planner.ordering import sort_tasks

logger = logging.getLogger(__name__)


class TaskCache:
    """In-memory mirror of the task collection.

    Args:
        client: Task API client used for every remote call.
    """

    def __init__(self, client: TaskClient) -> None:
        self._client = client
        self._tasks: list[TaskRead] = []

    # -- reads ---------------------------------------------------------------

    @property
    def tasks(self) -> list[TaskRead]:
        """Cached tasks in display order (a copy of the list)."""
        return list(self._tasks)

    @property
    def total(self) -> int:
        return len(self._tasks)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self._tasks if t.status == TaskStatus.completed)

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self._tasks if t.status == TaskStatus.pending)

    @property
    def has_tasks(self) -> bool:
        return bool(self._tasks)

    def _index_of(self, task_id: str) -> int | None:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    # -- mutations -----------------------------------------------------------

    async def refresh(self) -> list[TaskRead]:
        """Replace the cache with a full fetch from the server."""
        tasks = await self._client.list_tasks()
        self._tasks = sort_tasks(tasks)
        return self.tasks

    async def add(
        self,
        customer_name: str,
        location: str,
        task_type: str,
        scheduled_time: datetime,
        notes: Optional[str] = None,
    ) -> TaskRead:
        """Create a task remotely, then re-fetch the list."""
        task = await self._client.create_task(
            customer_name, location, task_type, scheduled_time, notes
        )
        await self.refresh()
        return task

    async def complete(
        self, task_id: str, completed_at: datetime | None = None
    ) -> None:
        """Complete a task remotely and mirror the change locally.

        *completed_at* defaults to now. If the task is no longer cached the
        local list is left alone; the next refresh brings it back in line.
        """
        completed = to_utc(completed_at) if completed_at is not None else utc_now()
        await self._client.complete_task(task_id, completed)

        index = self._index_of(task_id)
        if index is None:
            logger.debug("Completed task %s is not cached", task_id)
            return
        updated = self._tasks[index].model_copy(
            update={"status": TaskStatus.completed, "completed_at": completed}
        )
        tasks = list(self._tasks)
        tasks[index] = updated
        self._tasks = sort_tasks(tasks)

    async def delete(self, task_id: str) -> None:
        """Delete a task remotely and drop it from the cache."""
        await self._client.delete_task(task_id)
        self._tasks = [t for t in self._tasks if t.id != task_id]

    async def clear_completed(self) -> BulkDeleteResult:
        """Delete every cached Completed task, three requests at a time.

        Successful deletes are removed from the cache even when others
        fail; failures are returned in the result, not raised.
        """
        completed_ids = [
            t.id for t in self._tasks if t.status == TaskStatus.completed
        ]
        if not completed_ids:
            return BulkDeleteResult()

        result = await self._client.delete_tasks(completed_ids)
        deleted = set(result.deleted)
        self._tasks = [t for t in self._tasks if t.id not in deleted]
        if result.failed:
            logger.warning(
                "Cleared %d completed task(s), %d failed",
                len(result.deleted), len(result.failed),
            )
        return result
