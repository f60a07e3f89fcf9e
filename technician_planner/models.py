# technician_planner/models.py
"""Task table and the JSON shapes the task API speaks."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


class TaskType(str, Enum):
    installation = "Installation"
    repair = "Repair"
    maintenance = "Maintenance"
    inspection = "Inspection"


class TaskStatus(str, Enum):
    pending = "Pending"
    completed = "Completed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, hands back aware UTC.

    SQLite has no timezone support, so the offset is normalised away on
    the way in and reattached on the way out.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_utc(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Task(SQLModel, table=True):
    """A scheduled customer visit."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    customer_name: str
    location: str
    task_type: TaskType
    scheduled_time: datetime = Field(sa_type=UTCDateTime)
    notes: Optional[str] = Field(default=None)
    status: TaskStatus = Field(default=TaskStatus.pending, index=True)
    completed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TaskCreateRequest(WireModel):
    """Body of a create request.

    Everything is optional here so that the lifecycle service, not the
    request parser, decides what is missing. ``status`` and
    ``completedAt`` are not fields and are dropped if a client sends them.
    """

    customer_name: Optional[str] = None
    location: Optional[str] = None
    task_type: Optional[str] = None
    scheduled_time: Optional[str] = None
    notes: Optional[str] = None


class TaskCompleteRequest(WireModel):
    completed_at: Optional[str] = None


class TaskRead(WireModel):
    """Task as returned by the API and held by the client cache."""

    id: str = PydanticField(alias="_id")
    customer_name: str
    location: str
    task_type: TaskType
    scheduled_time: datetime
    notes: Optional[str] = None
    status: TaskStatus
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str


class TaskMessageResponse(MessageResponse):
    task: TaskRead
