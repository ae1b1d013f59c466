from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session

from ..database import get_db
from ..mapper import to_task_entity
from ..models import TaskStatus
from ..repositories import TaskRepository, UserRepository
from ..schemas.task import Task as TaskSchema, TaskCreate, TaskUpdate
from ..services import TaskService

router = APIRouter()


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(TaskRepository(db), UserRepository(db))


@router.get("", response_model=List[TaskSchema])
def get_all_tasks(service: TaskService = Depends(get_task_service)):
    """Retrieve a list of all tasks."""
    return service.get_all_tasks()


@router.get("/status/{task_status}", response_model=List[TaskSchema])
def get_tasks_by_status(task_status: TaskStatus, service: TaskService = Depends(get_task_service)):
    """Retrieve tasks filtered by their status."""
    return service.get_tasks_by_status(task_status)


@router.get("/category/{category}", response_model=List[TaskSchema])
def get_tasks_by_category(category: str, service: TaskService = Depends(get_task_service)):
    return service.get_tasks_by_category(category)


@router.get("/user/{user_id}", response_model=List[TaskSchema])
def get_tasks_by_user(user_id: str, service: TaskService = Depends(get_task_service)):
    return service.get_tasks_by_user(user_id)


@router.get("/priority/{priority}", response_model=List[TaskSchema])
def get_tasks_by_priority(priority: int, service: TaskService = Depends(get_task_service)):
    return service.get_tasks_by_priority(priority)


@router.get("/overdue", response_model=List[TaskSchema])
def get_overdue_tasks(service: TaskService = Depends(get_task_service)):
    """Tasks whose due date has passed. Tasks without a due date are never overdue."""
    return service.get_overdue_tasks()


@router.get("/created-after", response_model=List[TaskSchema])
def get_tasks_created_after(timestamp: datetime, service: TaskService = Depends(get_task_service)):
    return service.get_tasks_created_after(timestamp)


@router.post("", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
def create_task(task: TaskCreate, service: TaskService = Depends(get_task_service)):
    """Create a new task with the provided details."""
    return service.create_task(to_task_entity(task))


@router.put("/{task_id}", response_model=TaskSchema)
def update_task(task_id: str, task_update: TaskUpdate, service: TaskService = Depends(get_task_service)):
    """Update an existing task by its ID."""
    task = service.update_task(task_id, task_update)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    """Delete a task and its sub-tasks."""
    if not service.delete_task(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
