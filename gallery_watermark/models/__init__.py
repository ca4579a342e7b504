"""数据模型模块."""

from gallery_watermark.models.app_settings import Settings
from gallery_watermark.models.image_metadata import ImageMetadata, PublishedImage
from gallery_watermark.models.watermark_config import (
    BLEND_MODE_NAMES,
    BlendMode,
    WatermarkConfig,
)

__all__ = [
    # 设置
    "Settings",
    # 水印配置
    "BLEND_MODE_NAMES",
    "BlendMode",
    "WatermarkConfig",
    # 元数据
    "ImageMetadata",
    "PublishedImage",
]
