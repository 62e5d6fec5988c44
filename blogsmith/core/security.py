from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from blogsmith.core.config import settings

# CryptContext handles password hashing using bcrypt
# bcrypt is slow by design to prevent brute-force attacks
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidToken(Exception):
    """Signature mismatch, malformed payload, or expired token."""


@dataclass(frozen=True)
class TokenPayload:
    sub: str
    name: Optional[str] = None
    email: Optional[str] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    # bcrypt automatically generates a salt and includes it in the hash
    return pwd_context.hash(password)


def create_access_token(
    user_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token bound to ``user_id`` with expiration"""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # JWT standard 'sub' claim carries the user id
    to_encode = {"sub": str(user_id), "iat": now, "exp": now + expires_delta}
    if name is not None:
        to_encode["name"] = name
    if email is not None:
        to_encode["email"] = email

    # Algorithm must match in decode - changing this breaks all existing tokens
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> TokenPayload:
    """
    Decode and verify a JWT token.

    Raises InvalidToken for every failure so callers cannot tell an expired
    token from a forged one.
    """
    try:
        # Verifies signature and 'exp' automatically
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise InvalidToken("Token has no subject")

    return TokenPayload(
        sub=user_id,
        name=payload.get("name"),
        email=payload.get("email"),
    )
