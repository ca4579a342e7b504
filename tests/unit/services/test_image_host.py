"""图床客户端单元测试."""

from __future__ import annotations

import base64
from urllib.parse import parse_qs

import httpx
import pytest

from gallery_watermark.services.image_host import ImageHostClient
from gallery_watermark.utils.exceptions import (
    APIRequestError,
    APITimeoutError,
    ConfigurationError,
    ImageHostError,
    ServiceUnavailableError,
)

API_URL = "https://images.example.com/1/upload"
IMAGE_URL = "https://i.example.com/abc/watermarked.jpg"


def _client(handler, **kwargs) -> ImageHostClient:
    """使用 MockTransport 创建客户端."""
    kwargs.setdefault("api_key", "test-key")
    kwargs.setdefault("retry_delay", 0)
    return ImageHostClient(
        api_url=API_URL,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _success(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"data": {"url": IMAGE_URL}, "success": True})


# ===================
# 上传测试
# ===================
class TestImageHostUpload:
    """测试上传."""

    @pytest.mark.asyncio
    async def test_upload_success(self) -> None:
        """测试上传成功，请求携带密钥和 base64 图片."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return _success(request)

        client = _client(handler)
        try:
            url = await client.upload(b"\xff\xd8jpeg-bytes", name="photo")
        finally:
            await client.close()

        assert url == IMAGE_URL
        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert request.url.params["key"] == "test-key"
        form = parse_qs(request.content.decode("ascii"))
        assert form["image"] == [base64.b64encode(b"\xff\xd8jpeg-bytes").decode("ascii")]
        assert form["name"] == ["photo"]

    @pytest.mark.asyncio
    async def test_upload_without_name(self) -> None:
        """测试不传名称时不发送 name 字段."""
        forms = []

        def handler(request: httpx.Request) -> httpx.Response:
            forms.append(parse_qs(request.content.decode("ascii")))
            return _success(request)

        client = _client(handler)
        try:
            await client.upload(b"data")
        finally:
            await client.close()

        assert "name" not in forms[0]

    @pytest.mark.asyncio
    async def test_missing_api_key(self) -> None:
        """测试未配置密钥时不发送请求."""
        client = _client(_success, api_key="")

        with pytest.raises(ConfigurationError):
            await client.upload(b"data")

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self) -> None:
        """测试 4xx 错误直接失败且不重试."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"error": {"message": "Invalid API key"}})

        client = _client(handler)
        try:
            with pytest.raises(APIRequestError) as exc_info:
                await client.upload(b"data")
        finally:
            await client.close()

        assert exc_info.value.status_code == 400
        assert "Invalid API key" in exc_info.value.message
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_retried(self) -> None:
        """测试 5xx 错误重试后成功."""
        responses = iter([httpx.Response(503, text="busy"), None])

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses) or _success(request)

        client = _client(handler)
        try:
            assert await client.upload(b"data") == IMAGE_URL
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(self) -> None:
        """测试重试次数用尽后抛出 ServiceUnavailableError."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502)

        client = _client(handler, max_retries=2)
        try:
            with pytest.raises(ServiceUnavailableError):
                await client.upload(b"data")
        finally:
            await client.close()

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """测试请求超时."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client(handler, max_retries=0, timeout=5)
        try:
            with pytest.raises(APITimeoutError):
                await client.upload(b"data")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """测试连接失败."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler, max_retries=0)
        try:
            with pytest.raises(ServiceUnavailableError):
                await client.upload(b"data")
        finally:
            await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{"success": True}, {"data": {}}, {"data": {"url": ""}}, ["unexpected"]],
    )
    async def test_missing_url(self, payload) -> None:
        """测试响应中没有图片地址."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=payload)

        client = _client(handler)
        try:
            with pytest.raises(ImageHostError):
                await client.upload(b"data")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_close_recreates_client(self) -> None:
        """测试关闭后再次使用会重新创建 HTTP 客户端."""
        client = _client(_success)

        first = client.http_client
        await client.close()

        assert client.http_client is not first
        await client.close()
