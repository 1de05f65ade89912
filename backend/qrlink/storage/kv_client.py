"""
Cloudflare Workers KV client.

Talks to the KV REST API with httpx. Every call is a single independent
request: no retries, no read-modify-write, no transactions.

    PUT {base}/values/{key}?expiration_ttl={ttl}
    GET {base}/values/{key}

where base is /accounts/{account_id}/storage/kv/namespaces/{namespace_id}
and key is percent-encoded.
"""
import logging
from typing import Optional
from urllib.parse import quote
import httpx

from qrlink.config import settings
from qrlink.errors import ConfigError, StoreError
from qrlink.utils.logging import log_upstream_failure
from qrlink.utils.metrics import upstream_failures_total

logger = logging.getLogger(__name__)


class KVClient:
    """Thin async wrapper over one KV namespace."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(
            settings.r2_account_id
            and settings.cf_kv_namespace_id
            and settings.cf_kv_api_token
        )

    @property
    def base_url(self) -> str:
        return (
            f"{settings.cf_api_base_url}/accounts/{settings.r2_account_id}"
            f"/storage/kv/namespaces/{settings.cf_kv_namespace_id}"
        )

    def _client(self) -> httpx.AsyncClient:
        if not self.is_configured:
            raise ConfigError("Cloudflare KV not configured")
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {settings.cf_kv_api_token}"},
            transport=self._transport,
        )

    @staticmethod
    def _value_path(key: str) -> str:
        # The key must stay a single path segment under /values
        return f"/values/{quote(key, safe='')}"

    def _store_error(self, operation: str, message: str, status_code: Optional[int] = None) -> StoreError:
        upstream_failures_total.labels(service="kv").inc()
        log_upstream_failure(
            logger,
            service="kv",
            operation=operation,
            error=message,
            status_code=status_code,
            include_traceback=True,
        )
        return StoreError(message)

    async def put_value(self, key: str, value: str, ttl: int) -> None:
        """
        Write a value that the store expires after ttl seconds.

        Raises:
            ConfigError: namespace or token unset
            StoreError: transport failure or non-2xx response (body in message)
        """
        async with self._client() as client:
            try:
                response = await client.put(
                    self._value_path(key),
                    params={"expiration_ttl": ttl},
                    content=value,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as e:
                raise self._store_error("put", f"KV write failed: {e}") from e

        if not response.is_success:
            raise self._store_error(
                "put", f"KV write failed: {response.text}", response.status_code
            )

    async def get_value(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The raw value, or None when the key is absent or expired

        Raises:
            ConfigError: namespace or token unset
            StoreError: transport failure or non-2xx response other than 404
        """
        async with self._client() as client:
            try:
                response = await client.get(self._value_path(key))
            except httpx.HTTPError as e:
                raise self._store_error("get", f"KV read failed: {e}") from e

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise self._store_error(
                "get", f"KV read failed: {response.reason_phrase}", response.status_code
            )
        return response.text
