from sqlmodel import SQLModel, Field, Relationship
from typing import List
from uuid import uuid4

from .link import UserRoleLink


class Role(SQLModel, table=True):
    """Named role granted to users, e.g. ADMIN or USER."""
    __tablename__ = "roles"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(unique=True, index=True)

    users: List["User"] = Relationship(back_populates="roles", link_model=UserRoleLink)
