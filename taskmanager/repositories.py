"""Persistence gateways over users, roles and tasks.

Every mutating call is one commit on the session it wraps.
"""
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .errors import ConflictError
from .models import Role, Task, TaskStatus, User

USER_SORT_FIELDS = {
    "id": User.id,
    "username": User.username,
    "email": User.email,
    "created_at": User.created_at,
}


class RoleRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_name(self, name: str) -> Optional[Role]:
        return self.db.exec(select(Role).where(Role.name == name)).first()

    def find_all(self) -> List[Role]:
        return list(self.db.exec(select(Role).order_by(Role.name)).all())

    def save(self, role: Role) -> Role:
        self.db.add(role)
        self.db.commit()
        self.db.refresh(role)
        return role


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.exec(select(User).where(User.username == username)).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.exec(select(User).where(User.email == email)).first()

    def exists_by_id(self, user_id: str) -> bool:
        return self.find_by_id(user_id) is not None

    def exists_by_username(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def find_page(self, page: int, size: int, sort_field: str = "id", descending: bool = False) -> Tuple[List[User], int]:
        column = USER_SORT_FIELDS[sort_field]
        order = column.desc() if descending else column.asc()
        query = select(User).order_by(order).offset(page * size).limit(size)
        users = list(self.db.exec(query).all())
        total = self.db.exec(select(func.count()).select_from(User)).one()
        return users, total

    def save(self, user: User) -> User:
        """Persist the user; unique-constraint violations become ConflictError."""
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Username or email is already in use") from exc
        self.db.refresh(user)
        return user

    def delete_by_id(self, user_id: str) -> None:
        """Delete the user together with its role links and owned tasks."""
        user = self.find_by_id(user_id)
        if user is None:
            return
        owned = self.db.exec(select(Task.id).where(Task.user_id == user_id)).all()
        TaskRepository(self.db).delete_subtrees(list(owned))
        # Role links in the secondary table go with the user row
        self.db.delete(user)
        self.db.commit()


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def _ordered(self, query):
        return list(self.db.exec(query.order_by(Task.created_at, Task.id)).all())

    def find_all(self) -> List[Task]:
        return self._ordered(select(Task))

    def find_by_id(self, task_id: str) -> Optional[Task]:
        return self.db.get(Task, task_id)

    def exists_by_id(self, task_id: str) -> bool:
        return self.find_by_id(task_id) is not None

    def find_by_status(self, status: TaskStatus) -> List[Task]:
        return self._ordered(select(Task).where(Task.status == status))

    def find_by_category(self, category: str) -> List[Task]:
        return self._ordered(select(Task).where(Task.category == category))

    def find_by_user_id(self, user_id: str) -> List[Task]:
        return self._ordered(select(Task).where(Task.user_id == user_id))

    def find_by_priority(self, priority: int) -> List[Task]:
        return self._ordered(select(Task).where(Task.priority == priority))

    def find_subtree_ids(self, task_id: str) -> List[str]:
        """Ids of the task and all of its descendants, parents before children."""
        ids = [task_id]
        frontier = [task_id]
        while frontier:
            children = self.db.exec(select(Task.id).where(Task.parent_task_id.in_(frontier))).all()
            frontier = [child for child in children if child not in ids]
            ids.extend(frontier)
        return ids

    def save(self, task: Task) -> Task:
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete_subtrees(self, task_ids: List[str]) -> None:
        """Delete the given tasks and their sub-trees without committing."""
        doomed: List[str] = []
        for task_id in task_ids:
            for subtree_id in self.find_subtree_ids(task_id):
                if subtree_id not in doomed:
                    doomed.append(subtree_id)
        # Children first so no row ever points at a deleted parent
        for task_id in reversed(doomed):
            task = self.db.get(Task, task_id)
            if task is not None:
                self.db.delete(task)
                self.db.flush()

    def delete_by_id(self, task_id: str) -> None:
        """Delete the task and, explicitly, every sub-task below it."""
        self.delete_subtrees([task_id])
        self.db.commit()
