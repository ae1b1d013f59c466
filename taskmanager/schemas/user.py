from pydantic import BaseModel, Field
from typing import List, Optional


class UserBase(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")


class UserCreate(UserBase):
    password: str = Field(min_length=1)


class UserUpdate(UserBase):
    """Full replacement of username/email; password kept when omitted or empty."""
    password: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    roles: List[str] = []


class UserPage(BaseModel):
    content: List[UserResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int


class PrincipalResponse(BaseModel):
    """Authentication view of a user, without the password hash."""
    username: str
    authorities: List[str]


class AuthRequest(BaseModel):
    username: str
    password: str


class AuthResponse(BaseModel):
    token: str


class TokenData(BaseModel):
    username: Optional[str] = None
    authorities: List[str] = []
