from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session

from ..database import get_db
from ..errors import UserNotFoundError
from ..repositories import RoleRepository, UserRepository
from ..schemas.user import PrincipalResponse, UserCreate, UserPage, UserResponse, UserUpdate
from ..services import UserService

router = APIRouter()


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db), RoleRepository(db))


def _found(user: Optional[UserResponse]) -> UserResponse:
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=UserPage)
def get_all_users(
    page: int = 0,
    size: int = 20,
    sort: Optional[str] = None,
    service: UserService = Depends(get_user_service),
):
    """Paginated list of users. ``sort`` is ``field`` or ``field,asc|desc``."""
    return service.get_all_users(page, size, sort)


@router.get("/username/{username}", response_model=PrincipalResponse)
def get_user_by_username(username: str, service: UserService = Depends(get_user_service)):
    try:
        principal = service.load_user_for_authentication(username)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return PrincipalResponse(username=principal.username, authorities=list(principal.authorities))


@router.get("/email/{email}", response_model=UserResponse)
def get_user_by_email(email: str, service: UserService = Depends(get_user_service)):
    return _found(service.get_user_by_email(email))


@router.get("/{user_id}", response_model=UserResponse)
def get_user_by_id(user_id: str, service: UserService = Depends(get_user_service)):
    return _found(service.get_user_by_id(user_id))


@router.get("/{user_id}/roles", response_model=List[str])
def get_user_roles(user_id: str, service: UserService = Depends(get_user_service)):
    return _found(service.get_user_by_id(user_id)).roles


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, service: UserService = Depends(get_user_service)):
    return service.create_user(user)


@router.post("/role/{role_name}", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user_with_role(role_name: str, user: UserCreate, service: UserService = Depends(get_user_service)):
    return service.create_user_with_role(user, role_name)


@router.put("/{user_id}/roles/{role_name}", response_model=UserResponse)
def add_role_to_user(user_id: str, role_name: str, service: UserService = Depends(get_user_service)):
    return service.add_role_to_user(user_id, role_name)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: str, user: UserUpdate, service: UserService = Depends(get_user_service)):
    return _found(service.update_user(user_id, user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    if not service.delete_user(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
