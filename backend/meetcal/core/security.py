"""Password hashing and JWT encoding for the identity provider."""

from datetime import datetime, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from meetcal.config import settings

pwd_ctx = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def utcnow() -> datetime:
    """Naive UTC now, matching the naive DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_ctx.verify(password, hashed)


def create_access_token(user_id: str, session_id: str, expires_at: datetime) -> str:
    """Signed JWT: sub = user id, jti = session id."""
    to_encode = {
        "sub": user_id,
        "jti": session_id,
        "exp": expires_at.replace(tzinfo=timezone.utc),
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Claims of a valid, unexpired token; None otherwise."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
