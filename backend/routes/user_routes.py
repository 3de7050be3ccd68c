from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import get_current_user
from backend.models.user import User, UserRole
from backend.routes.auth_routes import UserResponse
from backend.routes.errors import to_http_exception
from backend.store import RecordStore, get_store

router = APIRouter(tags=['users'])


@router.get('', response_model=list[UserResponse])
def list_users(
    current_user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    if current_user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only admins can view all users.',
        )

    try:
        return store.list_users()
    except SQLAlchemyError as exc:
        raise to_http_exception(exc) from exc


@router.get('/instructors', response_model=list[UserResponse])
def list_instructors(store: RecordStore = Depends(get_store)):
    try:
        return store.list_users(role=UserRole.INSTRUCTOR.value)
    except SQLAlchemyError as exc:
        raise to_http_exception(exc) from exc
