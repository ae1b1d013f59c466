from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import Optional, List
from uuid import uuid4
import enum


class TaskStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class Task(SQLModel, table=True):
    """Task model, optionally nested under a parent task.

    Sub-tasks are removed together with their parent, see
    ``TaskRepository.delete_by_id``.

    Timestamps are stored as naive UTC (plain ``DateTime`` columns).
    """
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    description: Optional[str] = None
    status: TaskStatus = Field(default=TaskStatus.PENDING, index=True)
    category: Optional[str] = Field(default=None, index=True)
    priority: Optional[int] = Field(default=None, index=True)
    due_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    user_id: str = Field(foreign_key="users.id", index=True)
    parent_task_id: Optional[str] = Field(default=None, foreign_key="tasks.id", index=True)

    user: Optional["User"] = Relationship(back_populates="tasks")
    parent_task: Optional["Task"] = Relationship(
        back_populates="sub_tasks",
        sa_relationship_kwargs={"remote_side": "Task.id"},
    )
    sub_tasks: List["Task"] = Relationship(back_populates="parent_task")
