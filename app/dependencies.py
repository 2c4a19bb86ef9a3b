"""Request-scoped access to the services attached at startup."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import AuthError, ForbiddenError
from services.auth import AuthService
from services.readings import ReadingsService
from services.thresholds import ThresholdsService
from services.tokens import TokenClaims, TokenService, TokenVerificationError

_bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_readings_service(request: Request) -> ReadingsService:
    return request.app.state.readings_service


def get_thresholds_service(request: Request) -> ThresholdsService:
    return request.app.state.thresholds_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def require_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """Resolve the ``Authorization: Bearer`` header to verified claims."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required")
    try:
        return tokens.verify(credentials.credentials)
    except TokenVerificationError as exc:
        raise ForbiddenError(str(exc)) from exc
