from contextlib import contextmanager

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .config import DATABASE_URL

# Import all models to ensure they are registered with SQLModel metadata
from .models import Role, Task, User, UserRoleLink  # noqa: F401

_IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _create_engine():
    if DATABASE_URL in _IN_MEMORY_URLS:
        # A single shared connection, otherwise every session sees an empty database
        return create_engine(
            DATABASE_URL,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if DATABASE_URL.startswith("sqlite"):
        return create_engine(
            DATABASE_URL,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Postgres and friends: disable pooling and enable pre-ping
    return create_engine(
        DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
        poolclass=NullPool,
    )


engine = _create_engine()

SessionLocal = sessionmaker(class_=Session, autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_session():
    """Get a database session (context manager style).

    This is a convenience function for use outside of FastAPI dependencies.
    Usage:
        with get_session() as session:
            # do something with session
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def create_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(bind=engine)


def drop_tables():
    """Drop all database tables."""
    SQLModel.metadata.drop_all(bind=engine)
