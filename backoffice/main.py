# =============================================================================
# BACKOFFICE SERVICE - MAIN APPLICATION
# =============================================================================
# File: backoffice/main.py
# Description: FastAPI application factory with lifecycle management
# =============================================================================

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.api import LoggingMiddleware, health_router, v1_router
from backoffice.core.config import Settings, get_settings
from backoffice.core.exceptions import (
    BackofficeError,
    ConfigurationError,
    DatabaseError,
    DatabaseManagerError,
)
from backoffice.core.security import JWTManager, PasswordManager
from backoffice.db.factory import DriverFactory
from backoffice.db.manager import PRIMARY_DRIVER, DatabaseManager
from backoffice.logger import close_logger, create_logger, fields
from backoffice.services.auth_service import AuthService
from backoffice.services.user_service import UserService
from backoffice.utils.helpers import utc_now


logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal error occurred"


# =============================================================================
# DATABASE BOOTSTRAP
# =============================================================================

async def connect_databases(
    settings: Settings,
    manager: DatabaseManager,
    driver_factory: DriverFactory,
) -> None:
    """
    Connect the primary database and every secondary from DATABASES.

    A primary failure is fatal. A secondary that cannot be built or
    connected is logged and left out of the manager.

    Raises:
        ConfigurationError: Primary database misconfigured
        DatabaseError: Primary database unreachable
    """
    driver_type, driver_config = settings.primary_database.to_driver_config()
    primary = driver_factory.create_driver(driver_type, driver_config)
    manager.add_driver(PRIMARY_DRIVER, primary)
    await manager.connect_all(fail_fast=True)

    logger.info(
        "Primary database connected",
        extra=fields(driver=primary.type.value, mode=primary.access_mode.value),
    )

    for name, connection in settings.databases.items():
        if name in manager:
            logger.warning(
                "Skipping secondary database with reserved name",
                extra=fields(name=name),
            )
            continue

        try:
            driver_type, driver_config = connection.to_driver_config()
            driver = driver_factory.create_driver(driver_type, driver_config)
            await driver.connect()
        except (ConfigurationError, DatabaseError) as exc:
            logger.warning(
                "Failed to connect secondary database",
                extra=fields(name=name, driver=connection.driver, error=exc.message),
            )
            continue

        manager.add_driver(name, driver)
        logger.info(
            "Secondary database connected",
            extra=fields(name=name, driver=driver.type.value),
        )


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle manager.

    Handles startup and shutdown events:
    - Startup: Connect databases, create tables, build services
    - Shutdown: Close all connections and the log handlers
    """
    settings: Settings = app.state.settings
    manager: DatabaseManager = app.state.db_manager

    # STARTUP
    logger.info(
        "Starting application",
        extra=fields(name=settings.app_name, env=settings.app_env, mode=settings.server_mode),
    )

    try:
        await connect_databases(settings, manager, app.state.driver_factory)

        if settings.db_auto_migrate:
            await manager.get_driver(PRIMARY_DRIVER).create_tables()
            logger.info("Database tables created/verified")
    except BackofficeError as exc:
        logger.critical("Startup failed", extra=fields(error=exc.message))
        await _close_databases(manager)
        close_logger(app.state.logger)
        raise

    password_manager = PasswordManager(settings)
    jwt_manager = JWTManager(settings)
    app.state.auth_service = AuthService(manager, password_manager, jwt_manager)
    app.state.user_service = UserService(manager, password_manager)
    app.state.started_at = utc_now()

    logger.info(
        "Application started",
        extra=fields(databases=",".join(manager.names())),
    )

    yield  # Application runs here

    # SHUTDOWN
    logger.info("Shutting down application")
    await _close_databases(manager)
    logger.info("Application shutdown complete")
    close_logger(app.state.logger)


async def _close_databases(manager: DatabaseManager) -> None:
    try:
        await manager.close_all()
    except DatabaseManagerError as exc:
        logger.error("Failed to close databases", extra=fields(error=exc.message))
    else:
        logger.info("Database connections closed")


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Render every error as {error, error_code, message, details}."""

    @app.exception_handler(BackofficeError)
    async def backoffice_exception_handler(
        request: Request,
        exc: BackofficeError,
    ) -> JSONResponse:
        """
        Handle application exceptions.

        Server-side failures are logged with their cause and reach the
        client as a generic message with empty details.
        """
        if exc.status_code < 500:
            return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

        logger.error(
            exc.message,
            extra=fields(
                path=request.url.path,
                error_code=exc.error_code,
                details=exc.details,
            ),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "error_code": exc.error_code,
                "message": INTERNAL_ERROR_MESSAGE,
                "details": {},
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle request body and query validation errors."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "error_code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "details": {"errors": jsonable_encoder(exc.errors())},
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Handle standard HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "error_code": f"HTTP_{exc.status_code}",
                "message": exc.detail,
                "details": {},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception", extra=fields(path=request.url.path))

        # Don't expose internal errors outside development
        if settings.is_development:
            message = str(exc)
        else:
            message = INTERNAL_ERROR_MESSAGE

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "error_code": "INTERNAL_ERROR",
                "message": message,
                "details": {},
            },
        )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_application(
    settings: Optional[Settings] = None,
    driver_factory: Optional[DriverFactory] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Nothing is connected here; the lifespan connects databases and builds
    the services, all of which live on app.state.

    Args:
        settings: Configuration, loaded from the environment when omitted
        driver_factory: Factory used to build database drivers

    Returns:
        FastAPI: Configured application instance

    Raises:
        LoggerConfigError: Logging settings cannot be applied
    """
    settings = settings or get_settings()

    app_logger = create_logger(
        settings.log_channel,
        settings.log_level,
        settings.file_logger_config,
    )

    show_docs = settings.server_mode != "release" and not settings.is_production
    app = FastAPI(
        title=settings.app_name,
        description="Backoffice service with JWT authentication and user management",
        version=settings.app_version,
        docs_url="/docs" if show_docs else None,
        redoc_url="/redoc" if show_docs else None,
        openapi_url="/openapi.json" if show_docs else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.logger = app_logger
    app.state.driver_factory = driver_factory or DriverFactory()
    app.state.db_manager = DatabaseManager()

    # =========================================================================
    # MIDDLEWARE STACK (order matters - last added = outermost)
    # =========================================================================

    app.add_middleware(LoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    # =========================================================================
    # ROUTES
    # =========================================================================

    # API v1 routes
    app.include_router(v1_router)

    # Health routes at root level
    app.include_router(health_router)

    return app


# =============================================================================
# ENTRYPOINT
# =============================================================================

def run() -> None:
    """Serve the application with uvicorn using the environment settings."""
    settings = get_settings()

    uvicorn.run(
        "backoffice.main:create_application",
        factory=True,
        host=settings.server_host,
        port=settings.server_port,
        timeout_keep_alive=int(settings.server_idle_timeout.total_seconds()),
        timeout_graceful_shutdown=int(settings.server_shutdown_timeout.total_seconds()),
        log_level="debug" if settings.server_mode == "debug" else "info",
        access_log=settings.server_mode == "debug",
    )


if __name__ == "__main__":
    run()
