"""服务层模块."""

from gallery_watermark.services.image_host import ImageHostClient
from gallery_watermark.services.remote_image import RemoteImageFetcher
from gallery_watermark.services.watermark_service import (
    WatermarkService,
    get_watermark_service,
    reset_watermark_service,
)

__all__ = [
    # 图床
    "ImageHostClient",
    # 远程图片
    "RemoteImageFetcher",
    # 水印服务
    "WatermarkService",
    "get_watermark_service",
    "reset_watermark_service",
]
