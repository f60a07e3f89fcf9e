# technician_planner/client.py
"""Async HTTP client for the task API.

This is the only place that talks HTTP to the task service. Failures are
mapped onto the task error taxonomy with user-facing messages and raised
to the caller; nothing is retried.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from technician_planner.config import ClientSettings
from technician_planner.errors import (
    NotFoundError,
    PreconditionError,
    ServerError,
    TaskError,
    TransportError,
    ValidationError,
)
from technician_planner.models import TaskRead, to_utc

logger = logging.getLogger(__name__)

DELETE_CONCURRENCY = 3


@dataclass
class BulkDeleteResult:
    """Outcome of a batch of deletes: every id lands in exactly one bucket."""

    deleted: list[str] = field(default_factory=list)
    failed: dict[str, TaskError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def _error_for_response(response: httpx.Response) -> TaskError:
    try:
        body = response.json()
    except ValueError:
        body = None
    message = body.get("message") if isinstance(body, dict) else None

    status = response.status_code
    if status == 400:
        return ValidationError(message or "Invalid request data")
    if status == 404:
        return NotFoundError("Task not found")
    if status == 409:
        return PreconditionError(message or "Task is not in a state that allows this")
    return ServerError("Server error. Please try again later.")


def _decode(response: httpx.Response, parse):
    """Apply *parse* to a success body; an unexpected body is a ServerError."""
    try:
        return parse(response.json())
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning(
            "%s %s returned an unexpected body: %s",
            response.request.method, response.request.url.path, exc,
        )
        raise ServerError("Server error. Please try again later.") from exc


class TaskClient:
    """Thin async wrapper over the task API endpoints.

    Use as an async context manager, or call :meth:`aclose` when done.

    Args:
        settings: Base URL and default request timeout.
        transport: Optional httpx transport, e.g. ``httpx.ASGITransport``
            to talk to an in-process app.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._http = httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "TaskClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise TransportError("Request timed out. Please try again.") from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s connection error: %s", method, path, exc)
            raise TransportError(
                "Unable to connect to server. Please check your connection."
            ) from exc

        if response.is_success:
            return response

        error = _error_for_response(response)
        logger.warning(
            "%s %s failed with %d (%s)", method, path, response.status_code, error.kind
        )
        raise error

    async def create_task(
        self,
        customer_name: str,
        location: str,
        task_type: str,
        scheduled_time: datetime,
        notes: Optional[str] = None,
    ) -> TaskRead:
        payload = {
            "customerName": customer_name.strip(),
            "location": location.strip(),
            "taskType": task_type,
            "scheduledTime": to_utc(scheduled_time).isoformat(),
        }
        if notes and notes.strip():
            payload["notes"] = notes.strip()
        response = await self._request("POST", "/tasks/", json=payload)
        return _decode(response, lambda body: TaskRead.model_validate(body["task"]))

    async def list_tasks(self) -> list[TaskRead]:
        response = await self._request("GET", "/tasks/")
        return _decode(
            response, lambda body: [TaskRead.model_validate(item) for item in body]
        )

    async def complete_task(self, task_id: str, completed_at: datetime) -> TaskRead:
        response = await self._request(
            "PATCH",
            f"/tasks/{task_id}",
            json={"completedAt": to_utc(completed_at).isoformat()},
        )
        return _decode(response, lambda body: TaskRead.model_validate(body["task"]))

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    async def delete_tasks(
        self, task_ids: list[str], concurrency: int = DELETE_CONCURRENCY
    ) -> BulkDeleteResult:
        """Delete many tasks with at most *concurrency* requests in flight.

        A failed delete does not stop the others; every id ends up in
        either ``deleted`` (input order preserved) or ``failed``.
        """
        queue: asyncio.Queue[str] = asyncio.Queue()
        for task_id in task_ids:
            queue.put_nowait(task_id)

        succeeded: set[str] = set()
        failed: dict[str, TaskError] = {}

        async def worker() -> None:
            while True:
                try:
                    task_id = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                try:
                    await self.delete_task(task_id)
                except TaskError as exc:
                    failed[task_id] = exc
                else:
                    succeeded.add(task_id)

        workers = max(1, min(concurrency, len(task_ids)))
        await asyncio.gather(*(worker() for _ in range(workers)))

        return BulkDeleteResult(
            deleted=[task_id for task_id in task_ids if task_id in succeeded],
            failed=failed,
        )
