"""水印字体加载模块.

水印字体在导入时加载一次，之后只读。栅格化时直接用字体数据创建 Pillow
TrueType 字体，不依赖系统字体；导出 SVG 时以 @font-face 声明内嵌。
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass, field
from pathlib import Path

from PIL import ImageFont

from gallery_watermark.utils.constants import DEFAULT_FONT_PATH, WATERMARK_FONT_FAMILY
from gallery_watermark.utils.exceptions import ConfigurationError
from gallery_watermark.utils.logger import setup_logger

logger = setup_logger(__name__)

# 扩展名 -> (MIME 类型, CSS format 名)
FONT_FORMATS = {
    ".ttf": ("font/truetype", "truetype"),
    ".otf": ("font/opentype", "opentype"),
    ".woff": ("font/woff", "woff"),
    ".woff2": ("font/woff2", "woff2"),
}


@dataclass(frozen=True)
class WatermarkFont:
    """内嵌字体资源."""

    family: str
    data: bytes = field(repr=False)
    mime_type: str
    css_format: str

    @property
    def data_base64(self) -> str:
        """base64 编码的字体数据."""
        return base64.b64encode(self.data).decode("ascii")

    def truetype(self, size: int) -> ImageFont.FreeTypeFont:
        """创建指定字号的 Pillow 字体.

        Raises:
            ConfigurationError: 字体数据无法被 FreeType 解析
        """
        try:
            return ImageFont.truetype(io.BytesIO(self.data), size)
        except OSError as e:
            raise ConfigurationError(f"无法加载水印字体 {self.family}: {e}") from e

    @property
    def data_uri(self) -> str:
        """data URI 形式的字体数据."""
        return f"data:{self.mime_type};base64,{self.data_base64}"


def load_font(path: Path | str, family: str = WATERMARK_FONT_FAMILY) -> WatermarkFont:
    """从文件加载字体.

    Args:
        path: 字体文件路径
        family: 在叠加层中引用的字体名称

    Returns:
        WatermarkFont 实例

    Raises:
        ConfigurationError: 字体文件不存在、格式不支持或无法读取
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in FONT_FORMATS:
        raise ConfigurationError(f"不支持的字体格式: {path.name}")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"无法读取水印字体 {path}: {e}") from e

    if not data:
        raise ConfigurationError(f"水印字体文件为空: {path}")

    mime_type, css_format = FONT_FORMATS[suffix]
    logger.debug(f"水印字体已加载: {path.name} ({len(data)} bytes)")
    return WatermarkFont(
        family=family,
        data=data,
        mime_type=mime_type,
        css_format=css_format,
    )


# 进程级只读字体
WATERMARK_FONT = load_font(DEFAULT_FONT_PATH)
