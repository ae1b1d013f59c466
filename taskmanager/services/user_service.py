import math
from datetime import datetime
from typing import Optional, Tuple

from ..errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidQueryError,
    RoleNotFoundError,
    UserNotFoundError,
)
from ..mapper import to_user_entity, to_user_response
from ..repositories import USER_SORT_FIELDS, RoleRepository, UserRepository
from ..schemas.user import UserCreate, UserPage, UserResponse, UserUpdate
from ..security import Principal, get_password_hash, to_authorities

SORT_ALIASES = {"createdAt": "created_at"}

# Larger requested sizes are clamped
MAX_PAGE_SIZE = 2000
# Offsets must fit a signed 64-bit integer
MAX_OFFSET = 2 ** 63 - 1


def parse_sort(sort: Optional[str]) -> Tuple[str, bool]:
    """Parse ``"field"`` or ``"field,asc|desc"`` into (field, descending)."""
    if not sort:
        return "id", False
    field, _, direction = sort.partition(",")
    field = SORT_ALIASES.get(field.strip(), field.strip())
    direction = (direction.strip() or "asc").lower()
    if field not in USER_SORT_FIELDS:
        raise InvalidQueryError(f"Invalid sort field: {field}")
    if direction not in ("asc", "desc"):
        raise InvalidQueryError(f"Invalid sort order: {direction}")
    return field, direction == "desc"


class UserService:
    """User lifecycle, role assignment and authentication lookup."""

    def __init__(self, users: UserRepository, roles: RoleRepository):
        self.users = users
        self.roles = roles

    def get_all_users(self, page: int = 0, size: int = 20, sort: Optional[str] = None) -> UserPage:
        if page < 0 or size < 1:
            raise InvalidQueryError("page must be >= 0 and size >= 1")
        size = min(size, MAX_PAGE_SIZE)
        if page * size > MAX_OFFSET:
            raise InvalidQueryError("page is out of range")
        field, descending = parse_sort(sort)
        users, total = self.users.find_page(page, size, field, descending)
        return UserPage(
            content=[to_user_response(user) for user in users],
            page=page,
            size=size,
            total_elements=total,
            total_pages=math.ceil(total / size),
        )

    def get_user_by_id(self, user_id: str) -> Optional[UserResponse]:
        user = self.users.find_by_id(user_id)
        return to_user_response(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[UserResponse]:
        user = self.users.find_by_email(email)
        return to_user_response(user) if user else None

    def _ensure_available(self, request: UserCreate) -> None:
        if self.users.exists_by_username(request.username):
            raise DuplicateUsernameError(request.username)
        if self.users.exists_by_email(request.email):
            raise DuplicateEmailError(request.email)

    def create_user(self, request: UserCreate) -> UserResponse:
        self._ensure_available(request)
        user = to_user_entity(request, get_password_hash(request.password))
        return to_user_response(self.users.save(user))

    def create_user_with_role(self, request: UserCreate, role_name: str) -> UserResponse:
        """Create the user with the role attached, in a single write."""
        role = self.roles.find_by_name(role_name)
        if role is None:
            raise RoleNotFoundError(role_name)
        self._ensure_available(request)
        user = to_user_entity(request, get_password_hash(request.password))
        user.roles.append(role)
        return to_user_response(self.users.save(user))

    def add_role_to_user(self, user_id: str, role_name: str) -> UserResponse:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        role = self.roles.find_by_name(role_name)
        if role is None:
            raise RoleNotFoundError(role_name)
        if all(existing.id != role.id for existing in user.roles):
            user.roles.append(role)
        return to_user_response(self.users.save(user))

    def update_user(self, user_id: str, request: UserUpdate) -> Optional[UserResponse]:
        # Uniqueness is not re-checked here; the store's unique constraints
        # reject collisions with other users on save.
        user = self.users.find_by_id(user_id)
        if user is None:
            return None
        user.username = request.username
        user.email = request.email
        if request.password:
            user.hashed_password = get_password_hash(request.password)
        user.updated_at = datetime.utcnow()
        return to_user_response(self.users.save(user))

    def delete_user(self, user_id: str) -> bool:
        if not self.users.exists_by_id(user_id):
            return False
        self.users.delete_by_id(user_id)
        return True

    def load_user_for_authentication(self, username: str) -> Principal:
        user = self.users.find_by_username(username)
        if user is None:
            raise UserNotFoundError(username)
        return Principal(
            username=user.username,
            password_hash=user.hashed_password,
            authorities=to_authorities(user.role_names()),
        )
