"""
Strategy & CRM Platform API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api import __version__
from repositories.errors import NotFoundError
from repositories.settings import load_settings

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Strategy & CRM Platform API",
    description="REST API for the CRM pipeline, client roster and strategic objectives of each space",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)


@app.exception_handler(NotFoundError)
def handle_not_found(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": "Not found", "detail": str(exc), "status_code": 404},
    )


# pydantic's ValidationError subclasses ValueError; inside an endpoint it is a server fault.
@app.exception_handler(ValidationError)
def handle_model_failure(request: Request, exc: ValidationError):
    logger.error("Request %s %s built an invalid model: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal error", "detail": "Response could not be built", "status_code": 500},
    )


@app.exception_handler(ValueError)
def handle_invalid_value(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "detail": str(exc), "status_code": 400},
    )


@app.exception_handler(RuntimeError)
def handle_backend_failure(request: Request, exc: RuntimeError):
    logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Backend failure", "detail": str(exc), "status_code": 500},
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
        "service": "strategy-crm-platform-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Strategy & CRM Platform API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import clients, leads, objectives

app.include_router(objectives.router, prefix="/api/v1", tags=["Objectives"])
app.include_router(leads.router, prefix="/api/v1", tags=["Leads"])
app.include_router(clients.router, prefix="/api/v1", tags=["Clients"])
