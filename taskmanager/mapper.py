"""Conversions between persisted entities and transfer representations."""
from .models import Task, User
from .schemas.task import TaskCreate
from .schemas.user import UserBase, UserResponse


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        username=user.username,
        email=user.email,
        roles=user.role_names(),
    )


def to_user_entity(request: UserBase, hashed_password: str) -> User:
    """Build a new, unsaved user; the caller hashes the password."""
    return User(
        username=request.username,
        email=request.email,
        hashed_password=hashed_password,
    )


def to_task_entity(request: TaskCreate) -> Task:
    return Task(
        title=request.title,
        description=request.description,
        status=request.status,
        category=request.category,
        priority=request.priority,
        due_date=request.due_date,
        user_id=request.user_id,
        parent_task_id=request.parent_task_id,
    )
