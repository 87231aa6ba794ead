from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

import errors
from config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
# auto_error is off so a missing header yields 401 rather than FastAPI's default.
security = HTTPBearer(auto_error=False)


def hash_password(password: str):
    return pwd_context.hash(password)


def verify_password(password, hash):
    return pwd_context.verify(password, hash)


def create_access_token(user_id: int) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"id": user_id, "type": "access", "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise errors.UnauthenticatedError("Invalid or expired token") from exc


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> int:
    if credentials is None or not credentials.credentials:
        raise errors.UnauthenticatedError("Missing token")

    payload = decode_token(credentials.credentials)
    if payload.get("type") != "access":
        raise errors.UnauthenticatedError("Invalid token type")

    user_id = payload.get("id")
    if user_id is None:
        raise errors.UnauthenticatedError("Token missing user id")

    try:
        return int(user_id)
    except (TypeError, ValueError) as exc:
        raise errors.UnauthenticatedError("Invalid user id in token") from exc
