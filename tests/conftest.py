"""Pytest 配置和共享 fixtures."""

from __future__ import annotations

import io
from typing import Callable

import pytest
from PIL import Image

from gallery_watermark.core.config_manager import reset_config
from gallery_watermark.models.watermark_config import WatermarkConfig
from gallery_watermark.utils.logger import reset_logging, set_log_level

ImageFactory = Callable[..., bytes]


def make_image_bytes(
    width: int,
    height: int,
    format: str = "PNG",
    color: tuple = (100, 150, 200),
    mode: str = "RGB",
) -> bytes:
    """生成指定尺寸和格式的图片字节数据."""
    img = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def image_factory() -> ImageFactory:
    """返回图片生成函数."""
    return make_image_bytes


@pytest.fixture
def jpeg_1200x800() -> bytes:
    """1200x800 JPEG 图片."""
    return make_image_bytes(1200, 800, "JPEG")


@pytest.fixture
def png_10x10() -> bytes:
    """10x10 PNG 图片."""
    return make_image_bytes(10, 10, "PNG")


@pytest.fixture
def default_config() -> WatermarkConfig:
    """默认水印配置."""
    return WatermarkConfig()


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """隔离环境变量和 .env 文件，并重置配置单例."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "LOG_LEVEL",
        "LOG_DIR",
        "MAX_UPLOAD_SIZE",
        "IMAGE_HOST_API_KEY",
        "IMAGE_HOST_URL",
        "FONT_PATH",
        "WATERMARK_CONFIG_FILE",
        "WATERMARK_TILE_DIVISOR",
        "WATERMARK_FONT_SIZE_RATIO",
        "WATERMARK_ROTATION_ANGLE",
        "WATERMARK_OUTPUT_QUALITY",
        "WATERMARK_BLEND_MODE",
        "WATERMARK_LABEL_TEXT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    reset_config()
    yield tmp_path
    reset_config()
    reset_logging()
    set_log_level("INFO")
