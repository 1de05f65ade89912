"""
Short link business logic.

Records live in KV under short:<code> and expire after settings.short_link_ttl.
Codes are 6 random alphanumerics from the non-cryptographic `random` module.
There is no collision check: a create that draws an existing code silently
overwrites it (62^6 codes, so the odds are negligible but non-zero).
"""
import re
import random
import string
import time
import logging
from datetime import datetime, timezone
from typing import Optional

import pydantic

from qrlink.config import settings
from qrlink.errors import StoreError
from qrlink.schemas.shortlink import ShortLinkRecord
from qrlink.storage.kv_client import KVClient
from qrlink.utils.logging import log_short_link_created, log_short_link_resolved
from qrlink.utils.metrics import short_links_created_total, short_links_resolved_total

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
CODE_LENGTH = 6
KEY_PREFIX = "short:"

URL_PREFIX = re.compile(r'^https?://', re.IGNORECASE)


def generate_short_code(rng: random.Random = random, length: int = CODE_LENGTH) -> str:
    """Generate a random short code, e.g. 'aB3xY9'."""
    return ''.join(rng.choice(CODE_ALPHABET) for _ in range(length))


def classify_content(content: str) -> str:
    """'url' when the trimmed content starts with http:// or https://."""
    return "url" if URL_PREFIX.match(content.strip()) else "text"


def storage_key(code: str) -> str:
    return f"{KEY_PREFIX}{code}"


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision: 2025-01-01T12:00:00.000Z"""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"


class ShortLinkService:
    """
    Create and resolve short links.

    Each call performs exactly one KV request.
    """

    def __init__(self, kv: KVClient, rng: random.Random = random):
        self.kv = kv
        self.rng = rng

    async def create(self, content: str) -> str:
        """
        Store content under a new code.

        Args:
            content: URL or text, stored verbatim

        Returns:
            The short code

        Raises:
            ConfigError: KV not configured
            StoreError: KV write failed
        """
        start_time = time.time()

        code = generate_short_code(self.rng)
        record = ShortLinkRecord(
            content=content,
            type=classify_content(content),
            created_at=iso_timestamp(),
        )

        await self.kv.put_value(
            storage_key(code),
            record.model_dump_json(by_alias=True),
            ttl=settings.short_link_ttl,
        )

        short_links_created_total.labels(type=record.type).inc()
        log_short_link_created(
            logger,
            code=code,
            link_type=record.type,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return code

    async def resolve(self, code: str) -> Optional[ShortLinkRecord]:
        """
        Look up a code.

        Returns:
            The stored record, or None when unknown or expired

        Raises:
            ConfigError: KV not configured
            StoreError: KV read failed or returned a malformed record
        """
        start_time = time.time()

        raw = await self.kv.get_value(storage_key(code))
        if raw is None:
            short_links_resolved_total.labels(outcome="not_found").inc()
            log_short_link_resolved(
                logger, code=code, found=False,
                duration_ms=(time.time() - start_time) * 1000,
            )
            return None

        try:
            record = ShortLinkRecord.model_validate_json(raw)
        except pydantic.ValidationError as e:
            raise StoreError(f"Malformed short link record for {code}") from e

        short_links_resolved_total.labels(outcome="found").inc()
        log_short_link_resolved(
            logger, code=code, found=True,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return record


# Singleton instance
_short_link_service: Optional[ShortLinkService] = None


def get_short_link_service() -> ShortLinkService:
    """Get the singleton short link service (FastAPI dependency)."""
    global _short_link_service
    if _short_link_service is None:
        _short_link_service = ShortLinkService(KVClient())
    return _short_link_service
