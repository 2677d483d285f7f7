"""Authentication utilities: password hashing and bearer tokens."""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from app.errors import AuthError, AuthKind


# bcrypt work factor; tens of milliseconds per hash at 10
BCRYPT_ROUNDS = 10


class IdentityClaim(BaseModel):
    """Identity carried inside a bearer token. Never persisted."""

    user_id: str
    username: str

    model_config = {"frozen": True}


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string

    Example:
        >>> hashed = hash_password("mypassword123")
        >>> hashed.startswith("$2b$")
        True
    """
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Previously hashed password

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class TokenService:
    """Issues and verifies signed bearer tokens for an identity claim."""

    def __init__(self, secret: str, algorithm: str = "HS256", expiration_minutes: int = 1440):
        """
        Args:
            secret: Signing secret; changing it invalidates every issued token
            algorithm: JWT signing algorithm
            expiration_minutes: Default token lifetime, 0 for no expiry
        """
        self.secret = secret
        self.algorithm = algorithm
        self.expiration_minutes = expiration_minutes

    def issue(
        self, user_id: str, username: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a signed token for an account.

        Args:
            user_id: Account ID, stored in the ``sub`` claim
            username: Account handle
            expires_delta: Optional custom lifetime

        Returns:
            Encoded JWT token string
        """
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": user_id,
            "username": username,
            "iat": now,
        }

        if expires_delta is not None:
            to_encode["exp"] = now + expires_delta
        elif self.expiration_minutes > 0:
            to_encode["exp"] = now + timedelta(minutes=self.expiration_minutes)

        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> IdentityClaim:
        """
        Verify a token and return the identity it carries.

        Raises:
            AuthError: EXPIRED if past its lifetime, MALFORMED if it cannot
                be decoded, has a bad signature or lacks the identity claims
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthError(AuthKind.EXPIRED)
        except JWTError:
            raise AuthError(AuthKind.MALFORMED)

        user_id = payload.get("sub")
        username = payload.get("username")
        if not isinstance(user_id, str) or not isinstance(username, str):
            raise AuthError(AuthKind.MALFORMED)

        return IdentityClaim(user_id=user_id, username=username)
