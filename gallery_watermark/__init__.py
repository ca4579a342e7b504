"""图片市场平铺水印服务."""

from gallery_watermark.core.watermark_compositor import (
    WatermarkCompositor,
    WatermarkResult,
    apply_watermark,
)
from gallery_watermark.models.image_metadata import ImageMetadata
from gallery_watermark.models.watermark_config import BlendMode, WatermarkConfig
from gallery_watermark.utils.constants import APP_VERSION

__version__ = APP_VERSION

__all__ = [
    "BlendMode",
    "ImageMetadata",
    "WatermarkCompositor",
    "WatermarkConfig",
    "WatermarkResult",
    "apply_watermark",
]
