"""Sign-up and email sign-in.

There are no passwords: the demo marketplace trusts the email a visitor
types, and the role they pick at registration.
"""

import logging
import uuid
from urllib.parse import quote

from backend.core.errors import EmailAlreadyRegistered, FieldValidationError, UserNotFound
from backend.models.user import User, UserRole
from backend.store import RecordStore

logger = logging.getLogger(__name__)

AVATAR_URL = 'https://ui-avatars.com/api/?name={name}&background=random'


def register_user(store: RecordStore, name: str, email: str, role: str = UserRole.STUDENT.value) -> User:
    name = (name or '').strip()
    email = (email or '').strip().lower()
    if not name:
        raise FieldValidationError('name', 'Name is required.')
    if not email:
        raise FieldValidationError('email', 'Email is required.')
    if role not in {member.value for member in UserRole}:
        raise FieldValidationError('role', 'Invalid role.')

    if store.find_user_by_email(email) is not None:
        raise EmailAlreadyRegistered()

    # A concurrent sign-up with the same email still trips the unique index in insert_user.
    user = store.insert_user(
        User(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            role=role,
            avatar_url=AVATAR_URL.format(name=quote(name)),
        )
    )
    logger.info('Registered %s user %s.', user.role, user.id)
    return user


def sign_in(store: RecordStore, email: str) -> User:
    user = store.find_user_by_email(email or '')
    if user is None:
        raise UserNotFound()
    return user
