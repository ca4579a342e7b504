"""图片工具函数模块.

提供图片解码、元数据读取、重新编码等工具函数。
"""

from __future__ import annotations

import io
from typing import Iterable, Optional

from PIL import Image, UnidentifiedImageError

from gallery_watermark.utils.constants import (
    DEFAULT_OUTPUT_QUALITY,
    OUTPUT_FORMAT,
    SUPPORTED_IMAGE_FORMATS,
)
from gallery_watermark.utils.exceptions import (
    DecodeError,
    EmptyImageError,
    EncodeError,
    UnsupportedImageFormatError,
)
from gallery_watermark.utils.logger import setup_logger

logger = setup_logger(__name__)


def _open(data: bytes, formats: Optional[Iterable[str]]) -> Image.Image:
    """打开图片（仅解析文件头）.

    像素数超过 Image.MAX_IMAGE_PIXELS 时直接拒绝，不修改全局 warnings 过滤器，
    可在多个线程中同时调用。
    """
    if not data:
        raise EmptyImageError()

    try:
        image = Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, Image.DecompressionBombError,
            Image.DecompressionBombWarning) as e:
        raise DecodeError(f"无法识别的图片数据: {e}") from e
    except (OSError, ValueError) as e:
        raise DecodeError(f"图片解码失败: {e}") from e

    max_pixels = Image.MAX_IMAGE_PIXELS
    if max_pixels and image.width * image.height > max_pixels:
        pixels = image.width * image.height
        image.close()
        raise DecodeError(f"图片像素数 {pixels} 超过上限 {max_pixels}")

    if formats is not None and image.format not in formats:
        fmt = image.format or "unknown"
        image.close()
        raise UnsupportedImageFormatError(fmt)
    return image


def read_image_header(
    data: bytes,
    formats: Optional[Iterable[str]] = SUPPORTED_IMAGE_FORMATS,
) -> tuple[int, int, str]:
    """只读取图片头信息，不解码像素.

    Args:
        data: 图片字节数据
        formats: 允许的格式，None 表示不限制

    Returns:
        (宽度, 高度, 小写格式名) 元组

    Raises:
        DecodeError: 数据为空或无法识别
        UnsupportedImageFormatError: 格式不在允许范围内
    """
    with _open(data, formats) as image:
        width, height = image.size
        fmt = (image.format or "").lower()

    if width <= 0 or height <= 0:
        raise DecodeError(f"图片尺寸无效: {width}x{height}")
    return width, height, fmt


def decode_image(
    data: bytes,
    formats: Optional[Iterable[str]] = SUPPORTED_IMAGE_FORMATS,
) -> Image.Image:
    """完整解码图片像素.

    Args:
        data: 图片字节数据
        formats: 允许的格式，None 表示不限制

    Returns:
        已加载到内存的 PIL Image 对象

    Raises:
        DecodeError: 像素数据损坏或无法解码
    """
    image = _open(data, formats)
    try:
        image.load()  # 强制加载到内存
    except (OSError, ValueError, SyntaxError) as e:
        image.close()
        logger.error(f"图片像素解码失败: {e}")
        raise DecodeError(f"图片像素解码失败: {e}") from e
    return image


def ensure_rgba(image: Image.Image) -> Image.Image:
    """确保图片为 RGBA 模式.

    Args:
        image: PIL Image 对象

    Returns:
        RGBA 模式的图片
    """
    if image.mode == "RGBA":
        return image
    if image.mode in ("I;16", "I;16B", "I;16L", "I"):
        # 16 位灰度先缩放到 8 位
        image = image.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    return image.convert("RGBA")


def encode_image(
    image: Image.Image,
    format: str = OUTPUT_FORMAT,
    quality: int = DEFAULT_OUTPUT_QUALITY,
) -> bytes:
    """图片编码为字节数据.

    JPEG 不支持透明通道，编码前丢弃 alpha。

    Args:
        image: PIL Image 对象
        format: 图片格式
        quality: 质量 (1-100)

    Returns:
        图片字节数据

    Raises:
        EncodeError: 编码失败
    """
    format = format.upper()
    try:
        if format in ("JPEG", "JPG"):
            format = "JPEG"
            if image.mode != "RGB":
                image = image.convert("RGB")

        buffer = io.BytesIO()
        if format in ("JPEG", "WEBP"):
            image.save(buffer, format=format, quality=quality, optimize=True)
        else:
            image.save(buffer, format=format, optimize=True)
        return buffer.getvalue()
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"图片编码失败 ({format}): {e}")
        raise EncodeError(f"图片编码失败: {e}") from e
