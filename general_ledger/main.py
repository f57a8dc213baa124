"""
General Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from general_ledger.config import get_settings
from general_ledger.logging_config import configure_logging
from general_ledger.api.health import router as health_router
from general_ledger.api.accounts import router as accounts_router
from general_ledger.api.journals import router as journals_router
from general_ledger.api.reports import router as reports_router

settings = get_settings()

configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry ledger and financial reporting",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(journals_router)
app.include_router(reports_router)
