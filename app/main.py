from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from app.api import auth_router, readings_router, router, thresholds_router
from app.errors import register_error_handlers
from datastore.mock_table import MockTableStore, build_store
from logging_config import configure_logging
from services.auth import AuthService
from services.readings import ReadingsService
from services.thresholds import ThresholdsService
from services.tokens import TokenService
from settings import Settings, load_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    logger.info(
        "Service starting (token lifetime %s, persistence %s)",
        settings.jwt_expires_in,
        settings.store_persistence_path or "memory",
    )
    yield
    logger.info("Service stopped")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[MockTableStore] = None,
) -> FastAPI:
    """Build the application; raises ``ConfigurationError`` for a bad environment."""
    settings = settings if settings is not None else load_settings()
    configure_logging(settings.log_level)
    store = store if store is not None else build_store(settings)
    tokens = TokenService(settings.jwt_secret, settings.token_ttl_seconds)

    app = FastAPI(
        title="Sensor Auth API",
        description="Authentication plus sensor reading and threshold storage.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.token_service = tokens
    app.state.auth_service = AuthService(store, tokens, settings.password_rounds)
    app.state.readings_service = ReadingsService(store)
    app.state.thresholds_service = ThresholdsService(store)

    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(readings_router)
    app.include_router(thresholds_router)
    app.include_router(router)
    return app
