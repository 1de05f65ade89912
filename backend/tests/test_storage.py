"""
Tests for the R2 and KV storage clients.
"""
import logging
import pytest
import httpx
from unittest.mock import patch, MagicMock
from botocore.exceptions import ClientError

from qrlink.config import settings
from qrlink.errors import ConfigError, NotFoundError, StoreError, UpstreamError, ValidationError
from qrlink.storage.kv_client import KVClient
from qrlink.storage.r2_client import R2Client


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetObject")


class TestR2Client:
    """Tests for R2Client."""

    def test_configured_from_environment(self, r2_client: R2Client):
        assert r2_client.is_configured
        assert r2_client.bucket == "qrlink-test"

    def test_upload_url(self, r2_client: R2Client):
        url = r2_client.generate_presigned_upload_url("1700000000000.png", "image/png", 1024)

        assert url.startswith("https://testaccount.r2.cloudflarestorage.com/qrlink-test/1700000000000.png?")
        assert "X-Amz-Expires=300" in url

    def test_upload_url_over_limit(self, r2_client: R2Client):
        with pytest.raises(ValidationError, match="exceeds limit"):
            r2_client.generate_presigned_upload_url("a.bin", "application/octet-stream", settings.max_upload_size + 1)

    def test_upload_url_not_configured(self):
        with patch.object(settings, "r2_secret_key", None):
            r2 = R2Client()

        assert not r2.is_configured
        with pytest.raises(ConfigError):
            r2.generate_presigned_upload_url("a.png", "image/png", 10)

    def test_download_url_presigned(self, r2_client: R2Client):
        url = r2_client.get_download_url("a.png")

        assert "/qrlink-test/a.png?" in url
        assert "X-Amz-Expires=3600" in url

    def test_download_url_public(self, r2_client: R2Client):
        with patch.object(settings, "r2_public_domain", "files.example.com/"):
            assert r2_client.get_download_url("a.png") == "https://files.example.com/a.png"

    def test_download_url_public_without_credentials(self):
        with patch.object(settings, "r2_access_key", None):
            r2 = R2Client()
        with patch.object(settings, "r2_public_domain", "http://files.example.com"):
            assert r2.get_download_url("a.png") == "http://files.example.com/a.png"

    def test_explicit_endpoint(self):
        with patch.object(settings, "r2_endpoint", "https://s3.example.test"):
            r2 = R2Client()

        assert r2.generate_presigned_upload_url("k", "text/plain", 1).startswith("https://s3.example.test/")

    def test_stream_object(self, r2_client: R2Client):
        body = MagicMock()
        body.iter_chunks.return_value = iter([b"data"])
        mock_s3 = MagicMock()
        mock_s3.get_object.return_value = {"Body": body, "ContentType": "image/png", "ContentLength": 4}
        r2_client._client = mock_s3

        stored = r2_client.stream_object("a.png")

        assert stored.content_type == "image/png"
        assert stored.content_length == 4
        assert list(stored.body) == [b"data"]
        mock_s3.get_object.assert_called_once_with(Bucket="qrlink-test", Key="a.png")

    def test_stream_object_default_content_type(self, r2_client: R2Client):
        mock_s3 = MagicMock()
        mock_s3.get_object.return_value = {"Body": MagicMock()}
        r2_client._client = mock_s3

        stored = r2_client.stream_object("blob")

        assert stored.content_type == "application/octet-stream"
        assert stored.content_length is None

    def test_stream_object_missing(self, r2_client: R2Client):
        mock_s3 = MagicMock()
        mock_s3.get_object.side_effect = client_error("NoSuchKey")
        r2_client._client = mock_s3

        with pytest.raises(NotFoundError):
            r2_client.stream_object("missing.png")

    def test_stream_object_provider_error(self, r2_client: R2Client):
        mock_s3 = MagicMock()
        mock_s3.get_object.side_effect = client_error("AccessDenied")
        r2_client._client = mock_s3

        with pytest.raises(UpstreamError):
            r2_client.stream_object("a.png")

    def test_provider_error_logged_with_traceback(self, r2_client: R2Client, caplog):
        mock_s3 = MagicMock()
        mock_s3.get_object.side_effect = client_error("AccessDenied")
        r2_client._client = mock_s3

        with caplog.at_level(logging.ERROR, logger="qrlink.storage.r2_client"):
            with pytest.raises(UpstreamError):
                r2_client.stream_object("a.png")

        record = next(r for r in caplog.records if getattr(r, "event", None) == "upstream_failure")
        assert record.service_name == "r2"
        assert record.exc_info is not None
        assert record.exc_info[0] is ClientError


class TestKVClient:
    """Tests for KVClient against a mock transport."""

    @pytest.mark.asyncio
    async def test_put_request(self, kv_client: KVClient, fake_kv):
        await kv_client.put_value("short:abc123", '{"a": 1}', ttl=60)

        request = fake_kv.requests[0]
        assert request.method == "PUT"
        assert request.url.host == "api.cloudflare.com"
        assert request.url.path.endswith("/storage/kv/namespaces/test-namespace/values/short:abc123")
        assert request.headers["authorization"] == "Bearer test-token"
        assert request.headers["content-type"] == "application/json"
        assert request.content == b'{"a": 1}'

    @pytest.mark.asyncio
    async def test_get_value(self, kv_client: KVClient):
        await kv_client.put_value("k", "v", ttl=60)

        assert await kv_client.get_value("k") == "v"
        assert await kv_client.get_value("other") is None

    @pytest.mark.asyncio
    async def test_unauthorized_is_store_error(self, fake_kv):
        with patch.object(settings, "cf_kv_api_token", "revoked"):
            kv = KVClient(transport=httpx.MockTransport(fake_kv.handler))
            with pytest.raises(StoreError, match="KV read failed"):
                await kv.get_value("k")

    @pytest.mark.asyncio
    async def test_transport_error_is_store_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        kv = KVClient(transport=httpx.MockTransport(handler))
        with pytest.raises(StoreError, match="KV write failed"):
            await kv.put_value("k", "v", ttl=60)

    @pytest.mark.asyncio
    async def test_key_is_single_path_segment(self, kv_client: KVClient, fake_kv):
        await kv_client.put_value("short:a/../../keys", "v", ttl=60)

        assert await kv_client.get_value("short:a/../../keys") == "v"
        for request in fake_kv.requests:
            raw_path = request.url.raw_path.split(b"?")[0]
            assert raw_path.endswith(b"/namespaces/test-namespace/values/short%3Aa%2F..%2F..%2Fkeys")

    @pytest.mark.asyncio
    async def test_transport_error_logged_with_traceback(self, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        kv = KVClient(transport=httpx.MockTransport(handler))
        with caplog.at_level(logging.ERROR, logger="qrlink.storage.kv_client"):
            with pytest.raises(StoreError):
                await kv.get_value("k")

        record = next(r for r in caplog.records if getattr(r, "event", None) == "upstream_failure")
        assert record.service_name == "kv"
        assert record.operation == "get"
        assert record.exc_info is not None
        assert record.exc_info[0] is httpx.ConnectError

    @pytest.mark.asyncio
    async def test_error_response_logged_without_traceback(self, kv_client: KVClient, fake_kv, caplog):
        fake_kv.fail_with = (500, "boom")

        with caplog.at_level(logging.ERROR, logger="qrlink.storage.kv_client"):
            with pytest.raises(StoreError, match="KV write failed: boom"):
                await kv_client.put_value("k", "v", ttl=60)

        record = next(r for r in caplog.records if getattr(r, "event", None) == "upstream_failure")
        assert record.status_code == 500
        assert not record.exc_info
