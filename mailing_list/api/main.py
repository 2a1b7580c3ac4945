import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from mailing_list import __version__
from mailing_list.adapters.sqlite.migrator import SQLiteMigrator
from mailing_list.api.deps import get_settings, reset_email_adapter
from mailing_list.api.middleware import RequestLoggingMiddleware
from mailing_list.api.routes import health, subscriptions
from mailing_list.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load settings, configure logging and migrate the database (fail-fast)."""
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.json_logs)

    Path(settings.database.path).parent.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.database.path, settings.database.migrations_dir).run_migrations()
    logger.info("Serving confirmation links from %s", settings.application.base_url)

    yield

    reset_email_adapter()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Mailing List API",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(health.router, tags=["Health"])
    app.include_router(subscriptions.router, tags=["Subscriptions"])
    return app


app = create_app()
