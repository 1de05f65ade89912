"""
FastAPI application entry point.
Sets up the API, the short link page, error handlers and metrics.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from qrlink.config import settings
from qrlink.errors import QRLinkError
from qrlink.api.router import api_router
from qrlink.pages.short_link import router as pages_router
from qrlink.middleware.metrics_middleware import MetricsMiddleware
from qrlink.utils.logging import configure_logging

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Configure structured JSON logging
    """
    configure_logging('qrlink-api', settings.log_level)

    if not settings.access_password:
        logger.warning("ACCESS_PASSWORD not set: uploads and short link creation are open")

    yield


app = FastAPI(
    title="QRLink API",
    description="Presigned uploads and short links for the QR scanner/generator",
    version="0.1.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)


@app.exception_handler(QRLinkError)
async def qrlink_error_handler(request: Request, exc: QRLinkError):
    """
    Render application errors as {"message": ...}.
    5xx details stay in the logs.
    """
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            exc_info=exc
        )
        message = GENERIC_ERROR_MESSAGE
    else:
        message = exc.message
    return JSONResponse(status_code=exc.status_code, content={"message": message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Schema violations are 400 with the structured error list."""
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid parameters", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Framework errors (404 route, 405 method) in the same shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything unexpected: log it, return the generic message."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": GENERIC_ERROR_MESSAGE})


# Include API routes
app.include_router(api_router, prefix="/api")
app.include_router(pages_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "QRLink API",
        "version": "0.1.0",
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
