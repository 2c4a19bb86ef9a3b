"""Registration, login and profile lookup."""

from __future__ import annotations

import logging
import re
from typing import Optional

from app.errors import AuthError, ConflictError, NotFoundError, StoreError, ValidationError
from app.schemas import AuthResponse, User
from datastore.mock_table import USERS_TABLE, MockTableStore, StoreFailure, UniqueViolation
from services.passwords import hash_password, verify_password
from services.tokens import TokenClaims, TokenService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS = "Invalid credentials"

_PUBLIC_COLUMNS = ("id", "email", "name", "created_at")
_LOGIN_COLUMNS = _PUBLIC_COLUMNS + ("password_hash",)


class AuthService:
    """Coordinates the user table, password hashing and token issuance."""

    def __init__(
        self,
        store: MockTableStore,
        tokens: TokenService,
        password_rounds: int = 10,
    ) -> None:
        self.users = store.table(USERS_TABLE)
        self.tokens = tokens
        self.password_rounds = password_rounds

    def register(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
    ) -> AuthResponse:
        if not email or not password or not name:
            raise ValidationError("Email, password, and name are required")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        password_hash = hash_password(password, rounds=self.password_rounds)
        try:
            row = self.users.insert(
                {"email": email, "password_hash": password_hash, "name": name},
                columns=_PUBLIC_COLUMNS,
            )
        except UniqueViolation as exc:
            logger.info("Registration rejected for existing email", extra={"email": email})
            raise ConflictError("Email already exists") from exc
        except StoreFailure as exc:
            logger.error("User insert failed", extra={"table": USERS_TABLE, "reason": str(exc)})
            raise StoreError(str(exc)) from exc

        user = User.model_validate(row)
        logger.info("Registered user", extra={"user_id": user.id, "email": user.email})
        return AuthResponse(user=user, token=self._issue(user))

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResponse:
        if not email or not password:
            raise ValidationError("Email and password are required")

        row = self._find_user("email", email, _LOGIN_COLUMNS)
        if row is None:
            logger.info("Login failed", extra={"email": email, "reason": "unknown_email"})
            raise AuthError(INVALID_CREDENTIALS)

        password_hash = row.pop("password_hash", None) or ""
        if not verify_password(password, password_hash):
            logger.info("Login failed", extra={"email": email, "reason": "bad_password"})
            raise AuthError(INVALID_CREDENTIALS)

        user = User.model_validate(row)
        logger.info("User logged in", extra={"user_id": user.id})
        return AuthResponse(user=user, token=self._issue(user))

    def profile(self, user_id: str) -> User:
        row = self._find_user("id", user_id, _PUBLIC_COLUMNS)
        if row is None:
            raise NotFoundError("User not found")
        return User.model_validate(row)

    def _find_user(self, column: str, value: str, columns) -> Optional[dict]:
        try:
            return self.users.find_one(column, value, columns=columns)
        except StoreFailure as exc:
            logger.error("User lookup failed", extra={"table": USERS_TABLE, "reason": str(exc)})
            raise StoreError(str(exc)) from exc

    def _issue(self, user: User) -> str:
        return self.tokens.issue(TokenClaims(id=user.id, email=user.email))
