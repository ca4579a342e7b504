"""远程图片下载."""

from __future__ import annotations

from typing import Optional

import httpx

from gallery_watermark.utils.constants import HTTP_TIMEOUT, MAX_UPLOAD_SIZE
from gallery_watermark.utils.exceptions import (
    APITimeoutError,
    ImageFetchError,
    ImageTooLargeError,
    InvalidImageURLError,
)
from gallery_watermark.utils.logger import setup_logger

logger = setup_logger(__name__)


class RemoteImageFetcher:
    """按地址下载源图片，带大小上限.

    Example:
        >>> fetcher = RemoteImageFetcher(max_size=5 * 1024 * 1024)
        >>> data = await fetcher.fetch("https://example.com/photo.jpg")
    """

    def __init__(
        self,
        max_size: int = MAX_UPLOAD_SIZE,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._max_size = max_size
        self._timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """获取 HTTP 客户端."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    @staticmethod
    def validate_url(url: str) -> str:
        """校验图片地址，只接受 http/https.

        Raises:
            InvalidImageURLError: 地址为空或协议不支持
        """
        url = (url or "").strip()
        if not url.lower().startswith(("http://", "https://")):
            raise InvalidImageURLError(url)
        return url

    async def fetch(self, url: str) -> bytes:
        """下载图片.

        Args:
            url: 图片地址

        Returns:
            图片字节数据

        Raises:
            InvalidImageURLError: 地址无效
            ImageTooLargeError: 超过大小上限
            ImageFetchError: 下载失败
            APITimeoutError: 请求超时
        """
        url = self.validate_url(url)
        logger.info(f"开始下载远程图片: {url}")

        try:
            async with self.http_client.stream("GET", url) as response:
                if response.status_code != 200:
                    raise ImageFetchError(
                        f"下载图片失败 (HTTP {response.status_code}): {url}"
                    )

                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self._max_size:
                    raise ImageTooLargeError(int(declared), self._max_size)

                chunks = bytearray()
                async for chunk in response.aiter_bytes():
                    chunks.extend(chunk)
                    if len(chunks) > self._max_size:
                        raise ImageTooLargeError(len(chunks), self._max_size)
        except httpx.TimeoutException as e:
            logger.error(f"下载图片超时: {url}")
            raise APITimeoutError(self._timeout) from e
        except httpx.HTTPError as e:
            logger.error(f"下载图片失败: {url}, {e}")
            raise ImageFetchError(f"下载图片失败: {e}") from e

        logger.info(f"远程图片下载完成: {len(chunks)} bytes")
        return bytes(chunks)

    async def close(self) -> None:
        """关闭 HTTP 客户端."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
