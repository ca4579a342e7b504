"""图床上传客户端.

把水印图片以 base64 表单上传到 ImgBB 风格的图床接口，返回公开访问地址。
"""

from __future__ import annotations

import base64
from typing import Optional

import httpx

from gallery_watermark.utils.constants import (
    DEFAULT_IMAGE_HOST_URL,
    HTTP_TIMEOUT,
    UPLOAD_MAX_RETRIES,
    UPLOAD_RETRY_DELAY,
)
from gallery_watermark.utils.exceptions import (
    APIRequestError,
    APITimeoutError,
    ConfigurationError,
    ImageHostError,
    ServiceUnavailableError,
)
from gallery_watermark.utils.logger import setup_logger
from gallery_watermark.utils.retry import async_retry

logger = setup_logger(__name__)

# 可重试的异常
RETRYABLE_ERRORS = (APITimeoutError, ServiceUnavailableError)


class ImageHostClient:
    """图床上传客户端.

    API 规范:
        - POST {api_url}?key={api_key}
        - 表单字段: image (base64), name (可选)
        - 响应: {"data": {"url": "..."}, "success": true}

    Attributes:
        api_url: 上传地址
        timeout: 请求超时时间（秒）

    Example:
        >>> client = ImageHostClient(api_key="your-api-key")
        >>> url = await client.upload(image_bytes)
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_IMAGE_HOST_URL,
        timeout: float = HTTP_TIMEOUT,
        max_retries: int = UPLOAD_MAX_RETRIES,
        retry_delay: float = UPLOAD_RETRY_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """初始化图床客户端.

        Args:
            api_key: 图床 API 密钥
            api_url: 上传地址
            timeout: 请求超时时间（秒）
            max_retries: 超时或服务不可用时的最大重试次数
            retry_delay: 初始重试延迟（秒）
            transport: 自定义 HTTP 传输层
        """
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def api_url(self) -> str:
        """上传地址."""
        return self._api_url

    @property
    def http_client(self) -> httpx.AsyncClient:
        """获取 HTTP 客户端."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._http_client

    async def upload(self, image: bytes, name: Optional[str] = None) -> str:
        """上传图片.

        Args:
            image: 图片字节数据
            name: 图片名称（可选）

        Returns:
            图片公开访问地址

        Raises:
            ConfigurationError: 未配置 API 密钥
            APIRequestError: 图床返回错误状态码
            APITimeoutError: 请求超时
            ImageHostError: 响应中没有图片地址
        """
        if not self._api_key:
            raise ConfigurationError("图床 API 密钥未配置")

        upload_once = async_retry(
            max_retries=self._max_retries,
            delay=self._retry_delay,
            exceptions=RETRYABLE_ERRORS,
        )(self._upload_once)
        return await upload_once(image, name)

    async def _upload_once(self, image: bytes, name: Optional[str]) -> str:
        """执行一次上传请求."""
        form_data = {"image": base64.b64encode(image).decode("ascii")}
        if name:
            form_data["name"] = name

        logger.info(f"开始上传图片到图床: {len(image)} bytes")
        try:
            response = await self.http_client.post(
                self._api_url,
                params={"key": self._api_key},
                data=form_data,
            )
        except httpx.TimeoutException as e:
            logger.error(f"图床请求超时: {self._timeout}s")
            raise APITimeoutError(self._timeout) from e
        except httpx.TransportError as e:
            logger.error(f"无法连接到图床: {e}")
            raise ServiceUnavailableError(f"无法连接到图床: {e}") from e

        if response.status_code >= 500:
            raise ServiceUnavailableError(
                response.text or "图床服务不可用", response.status_code
            )
        if response.status_code != 200:
            raise APIRequestError(self._extract_error(response), response.status_code)

        try:
            url = response.json()["data"]["url"]
        except (ValueError, KeyError, TypeError) as e:
            raise ImageHostError(f"图床响应中没有图片地址: {response.text[:200]}") from e

        if not isinstance(url, str) or not url:
            raise ImageHostError("图床返回的图片地址为空")

        logger.info(f"图片上传完成: {url}")
        return url

    @staticmethod
    def _extract_error(response: httpx.Response) -> str:
        """从错误响应中提取错误信息."""
        try:
            payload = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            return str(error.get("message", error))
        return str(error) if error else f"HTTP {response.status_code}"

    async def close(self) -> None:
        """关闭 HTTP 客户端."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
