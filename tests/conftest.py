# tests/conftest.py

import os

# Must be set before taskmanager.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from taskmanager.bootstrap import init_roles  # noqa: E402
from taskmanager.database import create_tables, drop_tables, get_db, get_session  # noqa: E402
from taskmanager.main import app  # noqa: E402
from taskmanager.models import Task, TaskStatus  # noqa: E402
from taskmanager.repositories import RoleRepository, TaskRepository, UserRepository  # noqa: E402
from taskmanager.schemas.user import UserCreate  # noqa: E402
from taskmanager.security import Principal, create_access_token  # noqa: E402
from taskmanager.services import TaskService, UserService  # noqa: E402


@pytest.fixture()
def db():
    """Fresh in-memory schema with the built-in roles, per test."""
    create_tables()
    with get_session() as session:
        init_roles(session)
        yield session
    drop_tables()


@pytest.fixture()
def user_service(db) -> UserService:
    return UserService(UserRepository(db), RoleRepository(db))


@pytest.fixture()
def task_service(db) -> TaskService:
    return TaskService(TaskRepository(db), UserRepository(db))


@pytest.fixture()
def alice(user_service):
    return user_service.create_user_with_role(
        UserCreate(username="alice", email="alice@example.com", password="secret"), "USER"
    )


@pytest.fixture()
def make_task(task_service, alice):
    def _make(title="Task", **fields):
        fields.setdefault("user_id", alice.id)
        fields.setdefault("status", TaskStatus.PENDING)
        return task_service.create_task(Task(title=title, **fields))
    return _make


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(username="tester", *authorities):
    token = create_access_token(Principal(username=username, authorities=tuple(authorities)))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers():
    return bearer("root", "ROLE_ADMIN")


@pytest.fixture()
def user_headers():
    return bearer("alice", "ROLE_USER")


def iso(value: datetime) -> str:
    return value.isoformat()
