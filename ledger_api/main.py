"""
Double-Entry Ledger API - FastAPI Application.

This is the entry point for the application.
Logging, error handlers and all routers are registered here.

Run with:
    uvicorn ledger_api.main:app
"""

import logging

from fastapi import FastAPI

from ledger_api.api.books import router as books_router
from ledger_api.api.errors import register_error_handlers
from ledger_api.api.health import router as health_router
from ledger_api.api.ledger import router as ledger_router
from ledger_api.api.reports import router as reports_router
from ledger_api.config import get_settings
from ledger_api.logging_config import setup_logging

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry bookkeeping: books, balanced journal entries and reports",
    debug=settings.DEBUG,
)

register_error_handlers(app)

# Register routers
app.include_router(health_router)
app.include_router(books_router)
app.include_router(ledger_router)
app.include_router(reports_router)

logger.info("%s %s started (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ledger_api.main:app", host=settings.HOST, port=settings.PORT)
