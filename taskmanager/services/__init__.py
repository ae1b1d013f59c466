from .task_service import TaskService
from .user_service import UserService

__all__ = ["TaskService", "UserService"]
