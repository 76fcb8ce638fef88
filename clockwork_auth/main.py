"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from clockwork_auth.application.exceptions import ApplicationError
from clockwork_auth.domain.exceptions import DomainException
from clockwork_auth.infrastructure.config.settings import Settings, get_settings
from clockwork_auth.infrastructure.persistence.database import create_tables
from clockwork_auth.presentation.api.v1 import auth
from clockwork_auth.presentation.dependencies import get_database_engine, shutdown_dependencies
from clockwork_auth.presentation.exception_handlers import (
    application_error_handler,
    database_error_handler,
    domain_exception_handler,
    generic_exception_handler,
    validation_error_handler,
)

# Get settings for app configuration
_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not _settings.is_production:
        # Schema migrations own production databases
        await create_tables(get_database_engine(_settings))
    logger.info(f"{_settings.app_name} {_settings.app_version} started ({_settings.environment})")
    yield
    await shutdown_dependencies()
    logger.info("Shutdown complete")


app = FastAPI(
    title=_settings.app_name,
    description="Authentication and session-state service: signup, login with optional TOTP, "
    "token refresh and revocation, password reset",
    version=_settings.app_version,
    debug=_settings.debug,
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
# - ApplicationError handles ALL application layer exceptions
# - DomainException handles ALL domain layer exceptions
# - RequestValidationError handles Pydantic validation errors
# - SQLAlchemyError handles credential store failures
# - Exception handles everything else
app.add_exception_handler(ApplicationError, application_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(DomainException, domain_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, generic_exception_handler)

# Include routers
app.include_router(auth.router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "message": _settings.app_name,
        "status": "running",
        "version": _settings.app_version,
        "environment": _settings.environment,
    }


@app.get("/config")
async def show_config(settings: Settings = Depends(get_settings)) -> dict[str, str | int | bool | list[str]]:
    """Show current configuration (non-sensitive data only)."""
    return {
        "environment": settings.environment,
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "session_store": "redis" if settings.redis_url else "memory",
        "access_token_expire_minutes": settings.access_token_expire_minutes,
        "cors_origins": settings.cors_origins_list,
    }
