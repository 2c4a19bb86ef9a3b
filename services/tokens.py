"""Signed bearer tokens carrying a user id and email."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


@dataclass(frozen=True)
class TokenClaims:
    id: str
    email: str


class TokenVerificationError(Exception):
    """Verification failed; ``reason`` names the cause for internal use only."""

    def __init__(self, reason: str) -> None:
        super().__init__(INVALID_TOKEN_MESSAGE)
        self.reason = reason


class TokenService:

    def __init__(self, secret: str, ttl_seconds: int, algorithm: str = "HS256") -> None:
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self.algorithm = algorithm

    def issue(self, claims: TokenClaims) -> str:
        issued_at = datetime.now(timezone.utc)
        payload = {
            "id": claims.id,
            "email": claims.email,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise self._failure("expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise self._failure("bad_signature") from exc
        except jwt.InvalidTokenError as exc:
            raise self._failure("malformed") from exc

        user_id = payload.get("id")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise self._failure("missing_claims")
        return TokenClaims(id=user_id, email=email)

    @staticmethod
    def _failure(reason: str) -> TokenVerificationError:
        logger.info("Token verification failed", extra={"reason": reason})
        return TokenVerificationError(reason)
