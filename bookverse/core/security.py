from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password, scheme="bcrypt_sha256")


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(
    user_id: uuid.UUID,
    *,
    username: str,
    role: str,
    secret: str,
    algorithm: str,
    expires_minutes: int,
) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    claims = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_user_id(token: str, secret: str, algorithm: str) -> uuid.UUID:
    """Return the user id carried in ``sub``; raises ``ValueError`` on any defect."""
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    subject = claims.get("sub")
    if not subject:
        raise ValueError("Token has no subject")
    return uuid.UUID(subject)
