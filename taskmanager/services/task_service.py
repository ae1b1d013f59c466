from datetime import datetime
from typing import List, Optional

from ..errors import TaskNotFoundError, UserNotFoundError
from ..models import Task, TaskStatus
from ..repositories import TaskRepository, UserRepository
from ..schemas.task import TaskUpdate, as_naive_utc


class TaskService:
    """Task lifecycle and filtered queries."""

    def __init__(self, tasks: TaskRepository, users: UserRepository):
        self.tasks = tasks
        self.users = users

    def get_all_tasks(self) -> List[Task]:
        return self.tasks.find_all()

    def get_tasks_by_status(self, status: TaskStatus) -> List[Task]:
        return self.tasks.find_by_status(status)

    def get_tasks_by_category(self, category: str) -> List[Task]:
        return self.tasks.find_by_category(category)

    def get_tasks_by_user(self, user_id: str) -> List[Task]:
        return self.tasks.find_by_user_id(user_id)

    def get_tasks_by_priority(self, priority: int) -> List[Task]:
        return self.tasks.find_by_priority(priority)

    def get_overdue_tasks(self, now: Optional[datetime] = None) -> List[Task]:
        """Tasks due strictly before ``now``; tasks without a due date never are."""
        now = as_naive_utc(now) or datetime.utcnow()
        return [
            task for task in self.tasks.find_all()
            if task.due_date is not None and task.due_date < now
        ]

    def get_tasks_created_after(self, created_at: datetime) -> List[Task]:
        created_at = as_naive_utc(created_at)
        return [task for task in self.tasks.find_all() if task.created_at > created_at]

    def create_task(self, task: Task) -> Task:
        if not self.users.exists_by_id(task.user_id):
            raise UserNotFoundError(task.user_id)
        if task.parent_task_id is not None and not self.tasks.exists_by_id(task.parent_task_id):
            raise TaskNotFoundError(task.parent_task_id)
        now = datetime.utcnow()
        task.created_at = now
        task.updated_at = now
        return self.tasks.save(task)

    def update_task(self, task_id: str, updated: TaskUpdate) -> Optional[Task]:
        task = self.tasks.find_by_id(task_id)
        if task is None:
            return None
        task.title = updated.title
        task.description = updated.description
        task.status = updated.status
        task.category = updated.category
        task.priority = updated.priority
        task.due_date = updated.due_date
        task.updated_at = datetime.utcnow()
        return self.tasks.save(task)

    def delete_task(self, task_id: str) -> bool:
        if not self.tasks.exists_by_id(task_id):
            return False
        self.tasks.delete_by_id(task_id)
        return True
