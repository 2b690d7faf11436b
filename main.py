"""
HRIS Console - FastAPI Application Entry Point

Backend-for-frontend of the HRIS admin console. Payroll, leave and overtime
records live in the HRIS backend; this service validates requests, runs the
display-side calculations and forwards the rest.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hris.config import settings
from hris.utils.error_handling import setup_exception_handlers

# Configure logging
logging.basicConfig(
    level=settings.log_level_value,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"HRIS backend: {settings.backend_api_url}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Payroll, leave and overtime console for the HRIS backend",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "backend": settings.backend_api_url,
    }


@app.get("/api/v1")
async def api_root():
    """API v1 root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name} API v1",
        "endpoints": {
            "calculators": "/api/v1/calculators",
            "payroll": "/api/v1/payroll",
            "leave": "/api/v1/leave",
            "overtime": "/api/v1/overtime",
            "adjustments": "/api/v1/adjustments",
            "announcements": "/api/v1/announcements",
        }
    }


# ===========================================
# INCLUDE ROUTERS
# ===========================================

from hris.routers import (
    calculators,
    payroll,
    leave,
    overtime,
    adjustments,
    announcements,
)

app.include_router(calculators.router, prefix="/api/v1/calculators", tags=["Calculators"])
app.include_router(payroll.router, prefix="/api/v1/payroll", tags=["Payroll"])
app.include_router(leave.router, prefix="/api/v1/leave", tags=["Leave"])
app.include_router(overtime.router, prefix="/api/v1/overtime", tags=["Overtime"])
app.include_router(adjustments.router, prefix="/api/v1/adjustments", tags=["Adjustments"])
app.include_router(announcements.router, prefix="/api/v1/announcements", tags=["Announcements"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
