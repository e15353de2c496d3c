"""
IPO Calc Web API - FastAPI entry point.

Usage:
    uvicorn ipocalc.app:app --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ipocalc.api.routers import (
    calculator_router,
    settings_router,
    stocks_router,
    system_router,
)
from ipocalc.database import Database
from ipocalc.settings import Settings
from ipocalc.version import VERSION

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup, cleanup on shutdown."""
    db = Database()
    await db.connect()

    settings = Settings()
    await settings.init_defaults()
    logger.info("IPO calculator API ready")

    yield

    await db.close()
    logger.info("Database closed")


app = FastAPI(
    title="IPO Allotment Calculator",
    description="Outcome of IPO subscriptions from allotment statistics",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system_router, prefix="/api")
app.include_router(settings_router, prefix="/api")
app.include_router(stocks_router, prefix="/api")
app.include_router(calculator_router, prefix="/api")
