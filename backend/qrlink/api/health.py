"""
Health check endpoint.
Reports whether object storage and the KV store are configured.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from qrlink.services.shortlink_service import ShortLinkService, get_short_link_service
from qrlink.storage.r2_client import R2Client, get_r2_client

router = APIRouter()


@router.get("")
async def health_check(
    r2: R2Client = Depends(get_r2_client),
    short_links: ShortLinkService = Depends(get_short_link_service)
):
    """
    Health check endpoint.
    No provider calls are made: both backends are pay-per-request.
    """
    health_status = {
        "status": "healthy",
        "storage": "configured" if r2.is_configured else "not configured",
        "kv": "configured" if short_links.kv.is_configured else "not configured",
    }

    if not (r2.is_configured and short_links.kv.is_configured):
        health_status["status"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    return health_status
