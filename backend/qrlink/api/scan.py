"""
Scan inspection endpoint.
Classifies a decoded QR payload for the scan history.
"""
from fastapi import APIRouter, Depends

from qrlink.schemas.scan import ScanInspectRequest, ScanInspection
from qrlink.services.scan_service import ScanService, get_scan_service

router = APIRouter()


@router.post("/inspect", response_model=ScanInspection)
async def inspect_scan(
    request: ScanInspectRequest,
    service: ScanService = Depends(get_scan_service)
):
    """
    Inspect scanned content.

    Short links of this app are resolved first, then the first URL is
    extracted and R2 public URLs are checked for images. Public endpoint.
    """
    return await service.inspect(request.content)
