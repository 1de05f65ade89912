"""
Short link endpoints.

POST /shorten creates a short link (access password required).
GET /shorten?code= resolves one (public, used by the scan flow).
"""
from fastapi import APIRouter, Depends, Query, Request

from qrlink.auth.dependencies import require_access_password
from qrlink.errors import NotFoundError
from qrlink.schemas.shortlink import ShortLinkCreate, ShortLinkCreateResponse, ShortLinkRecord
from qrlink.services.shortlink_service import ShortLinkService, get_short_link_service

router = APIRouter()


def build_short_url(request: Request, code: str) -> str:
    """Short URL on the host the request came in on."""
    protocol = request.headers.get("x-forwarded-proto") or "https"
    host = request.headers.get("host")
    return f"{protocol}://{host}/s/{code}"


@router.post(
    "",
    response_model=ShortLinkCreateResponse,
    dependencies=[Depends(require_access_password)]
)
async def create_short_link(
    body: ShortLinkCreate,
    request: Request,
    service: ShortLinkService = Depends(get_short_link_service)
):
    """
    Create a short link for a URL or a piece of text.

    The password check runs before the body is validated.
    """
    code = await service.create(body.content)
    return ShortLinkCreateResponse(code=code, short_url=build_short_url(request, code))


@router.get("", response_model=ShortLinkRecord)
async def resolve_short_link(
    code: str = Query(..., min_length=1, max_length=20),
    service: ShortLinkService = Depends(get_short_link_service)
):
    """Return the stored record {content, type, createdAt}."""
    record = await service.resolve(code)
    if record is None:
        raise NotFoundError("Short link not found")
    return record
