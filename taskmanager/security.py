from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

from jose import JWTError, jwt
import bcrypt
from sqlmodel import Session

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from .errors import InvalidCredentialsError
from .repositories import UserRepository
from .schemas.user import TokenData

AUTHORITY_PREFIX = "ROLE_"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity: username, password hash and granted authorities."""
    username: str
    password_hash: Optional[str] = field(default=None, repr=False)
    authorities: Tuple[str, ...] = ()

    def has_any_authority(self, *authorities: str) -> bool:
        return any(authority in self.authorities for authority in authorities)


def to_authority(role_name: str) -> str:
    """Map a role name to its authority string, e.g. ``ADMIN`` -> ``ROLE_ADMIN``."""
    if role_name.startswith(AUTHORITY_PREFIX):
        return role_name
    return AUTHORITY_PREFIX + role_name


def to_authorities(role_names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted({to_authority(name) for name in role_names}))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt directly."""
    password_bytes = password.encode('utf-8')[:72]  # Truncate to 72 bytes (bcrypt limit)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def authenticate(db: Session, username: str, password: str):
    """Check credentials against the stored hash and return the user.

    Raises InvalidCredentialsError for an unknown username or a wrong
    password alike.
    """
    user = UserRepository(db).find_by_username(username)
    if not user or not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError()
    return user


def create_access_token(principal: Principal, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token for the principal."""
    to_encode = {"sub": principal.username, "authorities": list(principal.authorities)}
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[TokenData]:
    """Validate signature and expiry; ``None`` for any unusable token."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    username = payload.get("sub")
    if not username:
        return None
    authorities = payload.get("authorities") or []
    if not isinstance(authorities, list):
        return None
    return TokenData(username=username, authorities=[str(a) for a in authorities])


def principal_from_token(token: str) -> Optional[Principal]:
    token_data = decode_token(token) if token else None
    if token_data is None:
        return None
    return Principal(username=token_data.username, authorities=tuple(token_data.authorities))
