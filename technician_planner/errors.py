# technician_planner/errors.py
"""Error taxonomy shared by the task API and its HTTP client."""


class TaskError(Exception):
    """Base class for every failure the task lifecycle can report.

    ``kind`` and ``message`` are the only parts that ever leave the
    process; ``status_code`` is the HTTP status the API maps the error to.
    """

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"message": self.message, "kind": self.kind}


class ValidationError(TaskError):
    """Malformed or missing required input."""

    status_code = 400


class NotFoundError(TaskError):
    """Identifier does not resolve to a task."""

    status_code = 404


class PreconditionError(TaskError):
    """State-gated operation attempted on a task that does not satisfy the gate."""

    status_code = 409


class ServerError(TaskError):
    """Unclassified failure from the store or API layer."""

    status_code = 500


class TransportError(TaskError):
    """Network or connectivity failure observed by the client."""

    status_code = 503


class ConfigError(Exception):
    """Required configuration is missing or invalid at startup."""
