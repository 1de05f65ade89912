"""
Short link landing page: GET /s/{code}

Resolves the code on every request:
- unknown or expired code: 404 page
- url record: temporary redirect to the URL
- text record: HTML page showing the text, escaped, whitespace preserved
"""
import html
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse

from qrlink.errors import QRLinkError
from qrlink.services.shortlink_service import ShortLinkService, get_short_link_service

logger = logging.getLogger(__name__)

router = APIRouter()

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>
body {{ margin: 0; background: #f8f9fc; font-family: system-ui, sans-serif; }}
main {{ display: flex; min-height: 100vh; align-items: center; justify-content: center; padding: 1.5rem; box-sizing: border-box; }}
.card {{ width: 100%; max-width: 32rem; background: #fff; border-radius: 1rem; padding: 2rem; box-shadow: 0 10px 25px rgba(15, 23, 42, 0.12); }}
.content {{ margin: 0; white-space: pre-wrap; word-break: break-all; color: #1e293b; line-height: 1.6; }}
</style>
</head>
<body>
<main><div class="card"><p class="content">{body}</p></div></main>
</body>
</html>
"""


def render_page(title: str, body: str) -> str:
    return PAGE_TEMPLATE.format(title=html.escape(title), body=html.escape(body))


@router.get("/s/{code}", response_class=HTMLResponse, include_in_schema=False)
async def short_link_page(
    code: str,
    service: ShortLinkService = Depends(get_short_link_service)
):
    """Redirect to or display the content behind a short code."""
    try:
        record = await service.resolve(code)
    except QRLinkError as e:
        # The page never surfaces store errors; they render as not found
        logger.error(f"Failed to resolve short link page {code}: {e}")
        record = None

    if record is None:
        return HTMLResponse(
            render_page("Not Found", "This link does not exist or has expired."),
            status_code=status.HTTP_404_NOT_FOUND,
        )

    if record.type == "url":
        return RedirectResponse(record.content.strip(), status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    return HTMLResponse(render_page("Shared Content", record.content))
