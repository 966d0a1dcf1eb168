"""
Brainboard Backend: Session Token Provider
==========================================

What:  Issues and validates signed session tokens (JWT via python-jose).

Claims:
    sub  user id as a decimal string, parsed back to int on validation
    exp  issuance time + session TTL (72 hours by default)
    iat  issuance time
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from brainboard.config import Settings
from brainboard.exceptions import UnauthenticatedError


class IdentityProvider:
    """Signs and verifies bearer session tokens with one shared secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(hours=72)):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityProvider":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(hours=settings.session_ttl_hours),
        )

    def issue(self, user_id: int, now: Optional[datetime] = None) -> str:
        """Returns a signed token for `user_id` that expires `ttl` after `now`."""
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def validate(self, token: str) -> int:
        """
        Returns the user id carried by `token`.

        Raises:
            UnauthenticatedError: bad signature, malformed token, expired token,
                or a missing/non-numeric subject
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise UnauthenticatedError(message="Session token has expired")
        except JWTError as e:
            raise UnauthenticatedError(message="Invalid session token", context={"error": str(e)})

        subject = payload.get("sub")
        try:
            return int(subject)
        except (TypeError, ValueError):
            raise UnauthenticatedError(
                message="Invalid session token",
                context={"error": "subject claim is not a user id"},
            )
