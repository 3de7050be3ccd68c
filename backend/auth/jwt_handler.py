from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config
from backend.models.user import User


def create_access_token(subject: str, expires_minutes: int | None = None, claims: dict | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    issued_at = datetime.now(timezone.utc)
    payload = {"sub": subject, "exp": issued_at + timedelta(minutes=expire_minutes), "iat": issued_at}
    if claims:
        payload.update(claims)
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def create_user_token(user: User) -> str:
    # Role is informational for clients; requests re-read it from the store.
    return create_access_token(subject=user.email, claims={"uid": user.id, "role": user.role})


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
