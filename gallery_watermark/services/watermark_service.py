"""水印服务模块.

封装上传图片的完整处理流程：校验、下载、线程池中合成水印、上传图床。

Features:
    - 上传大小与格式校验（解码前）
    - 远程图片导入
    - 线程池执行合成，避免阻塞事件循环
    - 图床发布
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from gallery_watermark.core.config_manager import get_config
from gallery_watermark.core.watermark_compositor import WatermarkCompositor, WatermarkResult
from gallery_watermark.models.app_settings import Settings
from gallery_watermark.models.image_metadata import PublishedImage
from gallery_watermark.services.image_host import ImageHostClient
from gallery_watermark.services.remote_image import RemoteImageFetcher
from gallery_watermark.utils.constants import SUPPORTED_MIME_TYPES
from gallery_watermark.utils.exceptions import (
    AppException,
    EmptyImageError,
    ImageProcessError,
    ImageTooLargeError,
    UnsupportedImageFormatError,
)
from gallery_watermark.utils.logger import setup_logger

logger = setup_logger(__name__)


class WatermarkService:
    """水印服务.

    Attributes:
        compositor: 水印合成器
        host_client: 图床客户端
        fetcher: 远程图片下载器

    Example:
        >>> service = get_watermark_service()
        >>> published = await service.publish(upload_bytes, "image/png")
        >>> published.watermarked_url, published.metadata.size
    """

    def __init__(
        self,
        compositor: Optional[WatermarkCompositor] = None,
        host_client: Optional[ImageHostClient] = None,
        fetcher: Optional[RemoteImageFetcher] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """初始化水印服务.

        未传入的依赖按配置管理器中的设置创建。

        Args:
            compositor: 水印合成器
            host_client: 图床客户端
            fetcher: 远程图片下载器
            settings: 应用设置
        """
        if settings is None:
            config = get_config()
            settings = config.settings
            if compositor is None:
                compositor = WatermarkCompositor(config.watermark_config, config.font)
        elif compositor is None:
            compositor = WatermarkCompositor(settings.build_watermark_config())
        self._settings = settings
        self._compositor = compositor

        self._host_client = host_client or ImageHostClient(
            api_key=self._settings.image_host_api_key.get_secret_value(),
            api_url=self._settings.image_host_url,
            timeout=self._settings.http_timeout,
            max_retries=self._settings.upload_max_retries,
            retry_delay=self._settings.upload_retry_delay,
        )
        self._fetcher = fetcher or RemoteImageFetcher(
            max_size=self._settings.max_upload_size,
            timeout=self._settings.http_timeout,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=self._settings.worker_threads,
            thread_name_prefix="watermark",
        )

    @property
    def compositor(self) -> WatermarkCompositor:
        """水印合成器."""
        return self._compositor

    @property
    def host_client(self) -> ImageHostClient:
        """图床客户端."""
        return self._host_client

    @property
    def fetcher(self) -> RemoteImageFetcher:
        """远程图片下载器."""
        return self._fetcher

    def validate_upload(self, data: bytes, content_type: Optional[str] = None) -> None:
        """校验上传数据，在解码之前拒绝过大或类型不符的文件.

        Args:
            data: 上传的字节数据
            content_type: 上传时声明的 MIME 类型，None 表示不校验

        Raises:
            EmptyImageError: 数据为空
            ImageTooLargeError: 超过大小上限
            UnsupportedImageFormatError: MIME 类型不支持
        """
        if not data:
            raise EmptyImageError()

        max_size = self._settings.max_upload_size
        if len(data) > max_size:
            raise ImageTooLargeError(len(data), max_size)

        if content_type is not None:
            mime = content_type.split(";", 1)[0].strip().lower()
            if mime not in SUPPORTED_MIME_TYPES:
                raise UnsupportedImageFormatError(mime or "unknown")

    async def watermark(
        self,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> WatermarkResult:
        """校验并为图片添加水印.

        Args:
            data: 源图片字节数据
            content_type: 上传时声明的 MIME 类型

        Returns:
            WatermarkResult
        """
        self.validate_upload(data, content_type)
        return await self._compositor.apply_watermark_async(data, self._executor)

    async def publish(
        self,
        data: bytes,
        content_type: Optional[str] = None,
        name: Optional[str] = None,
        original_url: Optional[str] = None,
    ) -> PublishedImage:
        """添加水印并上传到图床.

        Args:
            data: 源图片字节数据
            content_type: 上传时声明的 MIME 类型
            name: 图床中的图片名称
            original_url: 原图地址（可选，原样写入结果）

        Returns:
            PublishedImage

        Raises:
            AppException: 校验、合成或上传失败
        """
        try:
            result = await self.watermark(data, content_type)
            url = await self._host_client.upload(result.watermarked_bytes, name)
        except AppException:
            raise
        except Exception as e:
            logger.exception(f"水印发布失败: {e}")
            raise ImageProcessError(f"水印发布失败: {e}") from e

        logger.info(f"水印图片已发布: {url}")
        return PublishedImage(
            watermarked_url=url,
            original_url=original_url,
            metadata=result.metadata,
        )

    async def publish_from_url(self, url: str, name: Optional[str] = None) -> PublishedImage:
        """下载远程图片，添加水印并上传到图床.

        Args:
            url: 原图地址
            name: 图床中的图片名称

        Returns:
            PublishedImage，original_url 为原图地址
        """
        url = self._fetcher.validate_url(url)
        data = await self._fetcher.fetch(url)
        return await self.publish(data, name=name, original_url=url)

    async def close(self) -> None:
        """释放线程池和 HTTP 客户端."""
        self._executor.shutdown(wait=False)
        await self._host_client.close()
        await self._fetcher.close()


# 全局服务实例
_watermark_service_instance: Optional[WatermarkService] = None


def get_watermark_service() -> WatermarkService:
    """获取水印服务单例.

    Returns:
        WatermarkService 实例
    """
    global _watermark_service_instance

    if _watermark_service_instance is None:
        _watermark_service_instance = WatermarkService()

    return _watermark_service_instance


def reset_watermark_service() -> None:
    """重置水印服务单例."""
    global _watermark_service_instance
    _watermark_service_instance = None
