from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from backend.auth import jwt_handler
from backend.auth.dependencies import get_current_user
from backend.core.errors import BusinessRuleViolation, FieldValidationError
from backend.models.user import User, UserRole
from backend.routes.errors import to_http_exception
from backend.services import accounts
from backend.store import RecordStore, get_store

router = APIRouter(tags=['auth'])


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized:
        raise ValueError('Email is required.')
    if '@' not in normalized:
        raise ValueError('Enter a valid email address.')
    return normalized


class RegisterRequest(BaseModel):
    name: str
    email: str
    role: UserRole = UserRole.STUDENT

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('role', mode='before')
    @classmethod
    def validate_role(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class LoginRequest(BaseModel):
    email: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    avatar_url: str | None = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    user: UserResponse


def issue_token(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=jwt_handler.create_user_token(user),
        user=UserResponse.model_validate(user),
    )


@router.post('/register', response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, store: RecordStore = Depends(get_store)):
    try:
        user = accounts.register_user(store, name=data.name, email=data.email, role=data.role.value)
    except (BusinessRuleViolation, FieldValidationError) as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        store.db.rollback()
        raise to_http_exception(exc) from exc

    return issue_token(user)


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, store: RecordStore = Depends(get_store)):
    try:
        user = accounts.sign_in(store, data.email)
    except BusinessRuleViolation as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise to_http_exception(exc) from exc

    return issue_token(user)


@router.get('/me', response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
