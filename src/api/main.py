"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryUserRepository
from src.adapters.repository.postgres import PostgresUserRepository, run_migrations
from src.adapters.smtp.background import BackgroundNotifier
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.api.routes import router
from src.config.logging import configure_logging
from src.config.settings import Settings, get_settings
from src.domain.exceptions import StoreUnavailable
from src.domain.ports import EmailSender

logger = logging.getLogger(__name__)

STARTUP_BANNER = (
    "\n----------------------------------------------------------\n\t"
    "Application '%s' is running! Access URLs:\n\t"
    "External: \t%s\n"
    "----------------------------------------------------------"
)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "account",
        "description": "Register, activate and manage user accounts",
    },
]


def build_email_sender(settings: Settings) -> EmailSender:
    if settings.mail_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_address=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    return ConsoleEmailSender()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the credential store (connection pool + migrations for postgres)
    - Starts the background notifier
    - Closes both on shutdown
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting application...")

    pool = None
    if settings.store_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.repository = PostgresUserRepository(pool)
    else:
        logger.warning("Using in-memory credential store; accounts are lost on restart")
        app.state.repository = InMemoryUserRepository()

    notifier = BackgroundNotifier(
        sender=build_email_sender(settings),
        base_url=settings.base_url,
        max_workers=settings.mail_workers,
    )
    app.state.notifier = notifier

    logger.info(STARTUP_BANNER, settings.app_name, settings.base_url)

    yield

    # Shutdown
    logger.info("Shutting down application...")
    notifier.shutdown()
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="accountkeeper",
    description="User account API - registration, activation, profile and password reset",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(router, prefix=get_settings().api_prefix)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> PlainTextResponse:
    """Store failures are not retried; the request fails with a generic error."""
    logger.error("Credential store unavailable | path=%s | %s", request.url.path, exc)
    return PlainTextResponse("Internal server error", status_code=500)


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with credential store validation.

    Returns 200 OK if application and store are healthy.
    """
    request.app.state.repository.ping()
    return {"status": "healthy"}
