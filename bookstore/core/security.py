import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import bcrypt
import jwt

from bookstore.core.config import Settings
from bookstore.core.errors import ForbiddenError


@dataclass(frozen=True)
class TokenIdentity:
    """Verified identity carried by a bearer token."""
    user_id: uuid.UUID
    expires_at: datetime


TokenVerifier = Callable[[str], TokenIdentity]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def issue_token(settings: Settings, user_id: uuid.UUID, now: datetime | None = None) -> str:
    """Sign a time-boxed token whose subject is the user id."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def build_token_verifier(settings: Settings) -> TokenVerifier:
    """
    Build a pure token -> identity function bound to the signing settings.
    Raises ForbiddenError for bad signatures, malformed or expired tokens.
    """
    secret = settings.JWT_SECRET
    algorithms = [settings.JWT_ALGORITHM]

    def verify(token: str) -> TokenIdentity:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=algorithms,
                options={"require": ["sub", "exp"]},
            )
            user_id = uuid.UUID(str(claims["sub"]))
        except jwt.ExpiredSignatureError as e:
            raise ForbiddenError("Token expired") from e
        except (jwt.InvalidTokenError, ValueError) as e:
            raise ForbiddenError("Invalid or expired token") from e

        expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
        return TokenIdentity(user_id=user_id, expires_at=expires_at)

    return verify
