"""Startup data: the built-in roles and, in development, demo accounts."""
import logging

from sqlmodel import Session

from .models import Role
from .repositories import RoleRepository, UserRepository
from .schemas.user import UserCreate
from .services import UserService

logger = logging.getLogger(__name__)

DEFAULT_ROLES = ("USER", "ADMIN")

# username, password, email, role
DEMO_USERS = (
    ("admin", "admin", "admin@example.com", "ADMIN"),
    ("user", "user", "user@example.com", "USER"),
)


def init_roles(db: Session) -> None:
    roles = RoleRepository(db)
    for name in DEFAULT_ROLES:
        if roles.find_by_name(name) is None:
            roles.save(Role(name=name))
            logger.info("Created role %s", name)


def load_demo_users(db: Session) -> None:
    users = UserRepository(db)
    service = UserService(users, RoleRepository(db))
    for username, password, email, role in DEMO_USERS:
        if users.exists_by_username(username):
            continue
        service.create_user_with_role(
            UserCreate(username=username, email=email, password=password), role
        )
        logger.info("Created demo user %s (%s)", username, role)
