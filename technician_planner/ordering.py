# technician_planner/ordering.py
"""Display order for task lists."""

from technician_planner.models import TaskStatus


def _sort_key(task) -> tuple[bool, object]:
    return (task.status != TaskStatus.pending, task.scheduled_time)


def sort_tasks(tasks) -> list:
    """Return *tasks* with Pending before Completed, each group by scheduled time.

    The sort is stable: tasks with equal status and scheduled time keep
    their input order. Works on anything with ``status`` and
    ``scheduled_time`` attributes.
    """
    return sorted(tasks, key=_sort_key)
