"""
Scanned QR payload inspection.

Turns decoded QR text into a scan history entry:
- short links of this app (.../s/<code>) are resolved to their content
- the first http(s) URL is extracted
- URLs on the public R2 domain are probed with HEAD to flag images
"""
import re
import logging
from typing import Optional

import httpx
from fastapi import Depends

from qrlink.errors import QRLinkError
from qrlink.schemas.scan import ScanInspection
from qrlink.services.shortlink_service import ShortLinkService, get_short_link_service
from qrlink.utils.urls import extract_r2_key, extract_url

logger = logging.getLogger(__name__)

SHORT_LINK_SUFFIX = re.compile(r'/s/([A-Za-z0-9]{4,20})$')


class ScanService:
    """Classify scanned content."""

    def __init__(
        self,
        short_links: ShortLinkService,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.short_links = short_links
        self._transport = transport

    async def inspect(self, content: str) -> ScanInspection:
        """
        Inspect one scanned payload.

        A short link that cannot be resolved (unknown, expired, or store
        unavailable) is inspected as plain scanned text instead.
        """
        match = SHORT_LINK_SUFFIX.search(content)
        if match:
            resolved = await self._resolve_short_link(match.group(1))
            if resolved is not None:
                extracted = extract_url(resolved)
                return ScanInspection(
                    content=resolved,
                    is_url=extracted is not None,
                    extracted_url=extracted,
                    short_code_url=content,
                )

        extracted = extract_url(content)
        r2_key = extract_r2_key(extracted) if extracted else None
        is_r2_image = False
        if r2_key:
            is_r2_image = await self._is_image(extracted)

        return ScanInspection(
            content=content,
            is_url=extracted is not None,
            extracted_url=extracted,
            is_r2_image=is_r2_image,
            r2_key=r2_key or None,
        )

    async def _resolve_short_link(self, code: str) -> Optional[str]:
        try:
            record = await self.short_links.resolve(code)
        except QRLinkError as e:
            logger.warning(f"Failed to resolve scanned short link {code}: {e}")
            return None
        return record.content if record else None

    async def _is_image(self, url: str) -> bool:
        """HEAD the object and check its Content-Type."""
        try:
            async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
                response = await client.head(url)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to detect R2 file type for {url}: {e}")
            return False

        if not response.is_success:
            return False
        return response.headers.get("content-type", "").startswith("image/")


def get_scan_service(
    short_links: ShortLinkService = Depends(get_short_link_service)
) -> ScanService:
    """FastAPI dependency."""
    return ScanService(short_links)
