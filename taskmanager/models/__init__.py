from .link import UserRoleLink
from .role import Role
from .user import User
from .task import Task, TaskStatus

# Export all models for easy importing
__all__ = ["UserRoleLink", "Role", "User", "Task", "TaskStatus"]
