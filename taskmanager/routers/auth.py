import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..database import get_db
from ..errors import InvalidCredentialsError
from ..repositories import RoleRepository, UserRepository
from ..schemas.user import AuthRequest, AuthResponse
from ..security import authenticate, create_access_token
from ..services import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=AuthResponse)
def login(request: AuthRequest, db: Session = Depends(get_db)):
    """Exchange username and password for a bearer token."""
    try:
        authenticate(db, request.username, request.password)
    except InvalidCredentialsError:
        logger.info("Failed login for %s", request.username)
        raise

    service = UserService(UserRepository(db), RoleRepository(db))
    principal = service.load_user_for_authentication(request.username)
    token = create_access_token(principal)
    logger.info("Issued token for %s", principal.username)
    return AuthResponse(token=token)
