import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .access import enforce_access_policy
from .bootstrap import init_roles, load_demo_users
from .config import CORS_ORIGINS, LOG_LEVEL, SEED_DEMO_DATA
from .database import create_tables, get_session
from .errors import AuthenticationError, TaskManagerError
from .routers import auth, tasks, users

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    with get_session() as db:
        init_roles(db)
        if SEED_DEMO_DATA:
            load_demo_users(db)
    logger.info("Task Manager API ready")
    yield


# Create FastAPI app
app = FastAPI(
    title="Task Manager API",
    description="Task and user management with role-based access control",
    version=__version__,
    lifespan=lifespan,
)

# Access policy runs inside CORS so preflight requests never need a token
app.middleware("http")(enforce_access_policy)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskManagerError)
async def task_manager_error_handler(request: Request, exc: TaskManagerError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)}, headers=headers)


# Include routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Task Management"])
app.include_router(users.router, prefix="/api/v1/users", tags=["User Management"])
