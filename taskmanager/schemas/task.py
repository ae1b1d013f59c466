from pydantic import BaseModel, field_validator
from datetime import datetime, timezone
from typing import Optional

from ..models.task import TaskStatus


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; convert aware values on the way in."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class TaskBase(BaseModel):
    """Base task schema with common fields."""
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    category: Optional[str] = None
    priority: Optional[int] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def _normalize_due_date(cls, value):
        return as_naive_utc(value)


class TaskCreate(TaskBase):
    """Schema for creating new tasks."""
    user_id: str
    parent_task_id: Optional[str] = None


class TaskUpdate(TaskBase):
    """Schema for updating existing tasks.

    Every field listed here replaces the stored value; owner and parent
    are not updatable.
    """
    pass


class Task(TaskBase):
    """Complete task schema with all fields."""
    id: str
    created_at: datetime
    updated_at: datetime
    user_id: str
    parent_task_id: Optional[str] = None

    class Config:
        from_attributes = True
