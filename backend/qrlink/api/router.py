"""
API router aggregator.
Includes all route modules.
"""
from fastapi import APIRouter
from qrlink.api import health, r2, shorten, scan

api_router = APIRouter()

# Include route modules
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(r2.router, prefix="/r2", tags=["r2"])
api_router.include_router(shorten.router, prefix="/shorten", tags=["shorten"])
api_router.include_router(scan.router, prefix="/scan", tags=["scan"])
