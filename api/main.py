"""
Credit Ledger Webhook API - Main Application.

FastAPI application receiving billing-provider webhooks.
"""

import logging
import os

from fastapi import FastAPI

from api import __version__

# Configure logging before routers create their loggers
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Credit Ledger Webhook API",
    description="Translates subscription billing events into credit-ledger updates",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "credit-ledger-webhook"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Credit Ledger Webhook API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import webhooks

app.include_router(webhooks.router, prefix="/api/v1", tags=["Webhooks"])
