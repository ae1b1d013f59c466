#!/usr/bin/env python
"""Create a user with a role from the command line.

Usage: python add_user.py USERNAME EMAIL PASSWORD [ROLE]
"""
import sys

from taskmanager.bootstrap import init_roles
from taskmanager.database import create_tables, get_session
from taskmanager.errors import TaskManagerError
from taskmanager.repositories import RoleRepository, UserRepository
from taskmanager.schemas.user import UserCreate
from taskmanager.services import UserService


def main(argv):
    if len(argv) not in (3, 4):
        print(__doc__.strip())
        return 2
    username, email, password = argv[:3]
    role = argv[3] if len(argv) == 4 else "USER"

    # Create tables if not exist
    create_tables()

    with get_session() as db:
        init_roles(db)
        service = UserService(UserRepository(db), RoleRepository(db))
        try:
            user = service.create_user_with_role(
                UserCreate(username=username, email=email, password=password), role
            )
        except TaskManagerError as exc:
            print(f"Could not create user: {exc}")
            return 1
    print(f"User created: {user.username} ({', '.join(user.roles)})")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
