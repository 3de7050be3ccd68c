"""User model definitions."""

import enum

from sqlalchemy import Column, String
from backend.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    INSTRUCTOR = "INSTRUCTOR"
    STUDENT = "STUDENT"


COURSE_MANAGER_ROLES = frozenset({UserRole.ADMIN.value, UserRole.INSTRUCTOR.value})


class User(Base):
    """Represents a marketplace user."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)  # stored lower-cased
    role = Column(String, index=True, nullable=False)
    avatar_url = Column(String)
