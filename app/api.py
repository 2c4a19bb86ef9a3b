"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import (
    get_auth_service,
    get_readings_service,
    get_thresholds_service,
    require_claims,
)
from app.schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    ProfileResponse,
    Reading,
    ReadingCreate,
    ReadingPage,
    RegisterRequest,
    Threshold,
    ThresholdCreate,
    ThresholdPage,
)
from services.auth import AuthService
from services.pagination import DEFAULT_LIMIT, DEFAULT_PAGE
from services.readings import ReadingsService
from services.thresholds import ThresholdsService
from services.tokens import TokenClaims

_ERRORS = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}
_AUTH_ERRORS = {
    **_ERRORS,
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
}

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
readings_router = APIRouter(prefix="/api/readings", tags=["readings"])
thresholds_router = APIRouter(prefix="/api/thresholds", tags=["thresholds"])
router = APIRouter()


@auth_router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses=_ERRORS,
    summary="Create an account and receive a bearer token.",
)
def register(
    body: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return service.register(body.email, body.password, body.name)


@auth_router.post(
    "/login",
    response_model=AuthResponse,
    responses=_AUTH_ERRORS,
    summary="Exchange email and password for a bearer token.",
)
def login(
    body: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return service.login(body.email, body.password)


@auth_router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={**_AUTH_ERRORS, status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Return the user the bearer token was issued to.",
)
async def profile(
    claims: TokenClaims = Depends(require_claims),
    service: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    return ProfileResponse(user=service.profile(claims.id))


@readings_router.get(
    "",
    response_model=ReadingPage,
    responses=_ERRORS,
    summary="Page through readings, newest first.",
)
async def list_readings(
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    service: ReadingsService = Depends(get_readings_service),
) -> ReadingPage:
    return service.list(page, limit)


@readings_router.get(
    "/latest",
    response_model=Optional[Reading],
    responses=_ERRORS,
    summary="Most recent reading, or null when there is none.",
)
async def latest_reading(
    service: ReadingsService = Depends(get_readings_service),
) -> Optional[Reading]:
    return service.latest()


@readings_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Reading,
    responses=_ERRORS,
    summary="Record a temperature reading.",
)
async def create_reading(
    body: ReadingCreate,
    service: ReadingsService = Depends(get_readings_service),
) -> Reading:
    return service.create(body.temperature, body.threshold_value)


@thresholds_router.get(
    "",
    response_model=ThresholdPage,
    responses=_ERRORS,
    summary="Page through configured thresholds, newest first.",
)
async def list_thresholds(
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    service: ThresholdsService = Depends(get_thresholds_service),
) -> ThresholdPage:
    return service.list(page, limit)


@thresholds_router.get(
    "/latest",
    response_model=Optional[Threshold],
    responses=_ERRORS,
    summary="Threshold currently in force, or null.",
)
async def latest_threshold(
    service: ThresholdsService = Depends(get_thresholds_service),
) -> Optional[Threshold]:
    return service.latest()


@thresholds_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Threshold,
    responses=_AUTH_ERRORS,
    summary="Set a new threshold. Requires a bearer token.",
)
async def create_threshold(
    body: ThresholdCreate,
    claims: TokenClaims = Depends(require_claims),
    service: ThresholdsService = Depends(get_thresholds_service),
) -> Threshold:
    return service.create(body.threshold_value, user_id=claims.id)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
