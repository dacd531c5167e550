"""
Studio Uploads API

Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import init_db
from app.middleware import ErrorHandlerMiddleware, request_validation_handler
from app.routes import leads, uploads

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    init_db()
    yield


app = FastAPI(
    title="Studio Uploads API",
    description="Chunked media uploads and lead intake for the studio portal",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handling middleware
app.add_middleware(ErrorHandlerMiddleware)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Register routers
app.include_router(uploads.router, prefix="/api", tags=["Uploads"])
app.include_router(leads.router, prefix="/api", tags=["Leads"])


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "Studio Uploads API",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """
    Detailed health check endpoint.

    Returns service health status for monitoring and deployment health checks.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
    }
