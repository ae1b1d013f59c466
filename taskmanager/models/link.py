from sqlmodel import SQLModel, Field


class UserRoleLink(SQLModel, table=True):
    """Association table for the user <-> role many-to-many relation."""
    __tablename__ = "user_roles"

    user_id: str = Field(foreign_key="users.id", primary_key=True)
    role_id: str = Field(foreign_key="roles.id", primary_key=True)
