"""
R2 endpoints: presigned URLs and downloads.

Implements the direct-to-storage flow:
1. POST /r2/presign {action: "put"} - Get presigned PUT URL for upload
2. Browser PUTs the file to R2
3. POST /r2/presign {action: "get"} or GET /r2/download - Fetch it back

Security:
- put and verify require the shared access password (when configured)
- get and download are public so shared QR links work for anyone
- Presigned PUT URLs expire after 5 minutes (configurable)
"""
import logging
from typing import Optional, Union
from urllib.parse import quote

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import RedirectResponse, StreamingResponse

from qrlink.auth.dependencies import check_access_password
from qrlink.config import settings
from qrlink.errors import ValidationError
from qrlink.schemas.presign import PresignRequest, PresignResponse, VerifyResponse
from qrlink.storage.presign import PresignService
from qrlink.storage.r2_client import R2Client, get_r2_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/presign", response_model=Union[PresignResponse, VerifyResponse])
async def presign(
    request: PresignRequest,
    x_access_password: Optional[str] = Header(None),
    r2: R2Client = Depends(get_r2_client)
):
    """
    Generate a presigned URL, or verify the access password.

    - put: requires size; the returned key is chosen by the server
      (timestamp + extension of the given filename)
    - get: public; returns a public-domain or presigned GET URL
    - verify: lets the browser check a password before caching it
    """
    # get is exempt so shared download links work without the password
    if request.action != "get":
        check_access_password(x_access_password)

    if request.action == "verify":
        return VerifyResponse()

    if request.action == "put":
        grant = PresignService.create_upload(
            r2,
            filename=request.key,
            content_type=request.content_type,
            size_bytes=request.size,
        )
        return PresignResponse(url=grant.url, key=grant.key)

    grant = PresignService.create_download(r2, request.key)
    return PresignResponse(url=grant.url, key=grant.key)


@router.get("/download")
def download(
    key: Optional[str] = Query(None),
    r2: R2Client = Depends(get_r2_client)
):
    """
    Download an object by key.

    With the default "redirect" strategy this answers 307 to the public or
    presigned URL. The "stream" strategy proxies the bytes through the API
    with attachment headers. Sync route: boto3 blocks, so FastAPI runs it
    in the threadpool.
    """
    if not key:
        raise ValidationError("Missing or invalid 'key' parameter")

    if settings.download_strategy == "redirect":
        grant = PresignService.create_download(r2, key)
        return RedirectResponse(grant.url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    stored = r2.stream_object(key)
    filename = quote(key.split("/")[-1] or "download", safe="!*'()")

    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
    }
    if stored.content_length:
        headers["Content-Length"] = str(stored.content_length)

    logger.info(f"Streaming download: {key}")
    return StreamingResponse(stored.body, media_type=stored.content_type, headers=headers)
