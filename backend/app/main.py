"""
Trade Estimator Backend API

FastAPI application for drywall hanging, drywall finishing and painting
estimates.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.estimates import router as estimates_router
from .core.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="""
## Trade Estimator API

Room-based pricing for interior trades.

### Core Principle: Totals Are Always Derived

Every total is recomputed from rooms, overrides and trade configuration:
- Gross sqft for drywall hanging (sheet goods)
- Net sqft (openings deducted) for finishing and painting
- Complexity applies to material + labor, addons are added after

### Current Capabilities

- **Rooms**: Rectangular, L-shape and custom rooms with doors and windows
- **Trades**: Drywall hanging, drywall finishing, painting
- **Documents**: Flattened per-trade breakdown and Excel export
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API routers
app.include_router(estimates_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Drywall and painting estimate API",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {
        "status": "ok",
        "app": settings.app_name,
        "version": settings.app_version,
    }
