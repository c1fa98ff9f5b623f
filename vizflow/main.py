import logging
from fastapi import FastAPI

from vizflow import __version__
from vizflow.core.config import settings
from vizflow.core.database import init_db
from vizflow.controllers import (
    chart_controller,
    dashboard_controller,
    job_controller,
    widget_controller,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# Create FastAPI app
app = FastAPI(title=settings.APP_TITLE)


@app.on_event("startup")
def startup():
    """
    Initialize database tables
    """
    init_db()
    if not settings.llm_configured():
        logging.getLogger(__name__).warning(
            "Azure OpenAI is not configured; chart generation will fail with 502"
        )


# Include routers
app.include_router(chart_controller.router)
app.include_router(job_controller.router)
app.include_router(dashboard_controller.router)
app.include_router(widget_controller.router)  # Natural-language widget edits


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "vizflow chart synthesis API",
        "docs": "/docs",
        "version": __version__
    }
