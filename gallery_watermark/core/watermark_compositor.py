"""平铺水印合成器.

提供水印合成的核心流程：读取尺寸、计算平铺布局、生成叠加层描述、
用内嵌字体栅格化并与原图混合，最后重新编码为 JPEG。

Features:
    - 仅读文件头获取元数据
    - 平铺数量上限保护
    - over / overlay 两种混合模式
    - 线程池异步调用
"""

from __future__ import annotations

import asyncio
import math
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageFont

from gallery_watermark.core.overlay_markup import OverlayMarkup, TextTile, build_overlay_markup
from gallery_watermark.core.tile_layout import TileLayout, compute_tile_layout
from gallery_watermark.models.image_metadata import ImageMetadata
from gallery_watermark.models.watermark_config import BlendMode, WatermarkConfig
from gallery_watermark.utils.constants import OUTPUT_FORMAT
from gallery_watermark.utils.exceptions import AppException, EncodeError
from gallery_watermark.utils.font_loader import WATERMARK_FONT, WatermarkFont
from gallery_watermark.utils.image_utils import (
    decode_image,
    encode_image,
    ensure_rgba,
    read_image_header,
)
from gallery_watermark.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class WatermarkResult:
    """水印合成结果."""

    watermarked_bytes: bytes  # 重新编码后的图片
    metadata: ImageMetadata  # 源图片元数据
    layout: TileLayout  # 使用的平铺布局
    quality: int  # 输出质量
    output_format: str = OUTPUT_FORMAT


def _rgba(color: str, opacity: float) -> tuple[int, int, int, int]:
    """颜色名和不透明度转换为 RGBA."""
    red, green, blue = ImageColor.getrgb(color)[:3]
    return red, green, blue, round(255 * opacity)


def _load_tile_font(
    font: Optional[WatermarkFont],
    size: int,
) -> ImageFont.FreeTypeFont:
    """加载指定字号的字体，未提供内嵌字体时使用 Pillow 默认字体."""
    if font is not None:
        return font.truetype(size)
    return ImageFont.load_default(size=size)


def render_tile_stamp(tile: TextTile, font: ImageFont.FreeTypeFont) -> Image.Image:
    """绘制单个旋转后的水印文字.

    文字中心位于返回图片的正中心，图片边长足以容纳任意角度的旋转。

    Args:
        tile: 文字描述
        font: 已按 tile.font_size 加载的字体

    Returns:
        RGBA 图片，边长为偶数
    """
    stroke = max(0, round(tile.stroke_width))
    left, top, right, bottom = font.getbbox(tile.label, stroke_width=stroke, anchor="mm")
    radius = math.ceil(math.hypot(max(-left, right), max(-top, bottom))) + 1

    stamp = Image.new("RGBA", (radius * 2, radius * 2), (0, 0, 0, 0))
    ImageDraw.Draw(stamp).text(
        (radius, radius),
        tile.label,
        font=font,
        anchor="mm",
        fill=_rgba(tile.fill, tile.fill_opacity),
        stroke_width=stroke,
        stroke_fill=_rgba(tile.stroke, tile.stroke_opacity),
    )
    if tile.rotation % 360 == 0:
        return stamp
    # SVG 的 rotate 以顺时针为正，Pillow 以逆时针为正
    return stamp.rotate(
        -tile.rotation,
        resample=Image.Resampling.BICUBIC,
        center=(radius, radius),
    )


def rasterize_overlay(markup: OverlayMarkup) -> Image.Image:
    """将叠加层栅格化为与画布同尺寸的 RGBA 图片.

    每种样式只绘制一次，再按各单元中心叠加；文字可以超出画布边缘。

    Raises:
        EncodeError: 绘制失败
        ConfigurationError: 内嵌字体无法加载
    """
    try:
        fonts: dict[int, ImageFont.FreeTypeFont] = {}
        stamps: dict[tuple, Image.Image] = {}
        for tile in markup.tiles:
            if tile.style_key in stamps:
                continue
            if tile.font_size not in fonts:
                fonts[tile.font_size] = _load_tile_font(markup.font, tile.font_size)
            stamps[tile.style_key] = render_tile_stamp(tile, fonts[tile.font_size])

        # 四周留白，保证越界的单元也能以非负坐标叠加
        margin = max((stamp.width for stamp in stamps.values()), default=0)
        canvas = Image.new(
            "RGBA",
            (markup.width + 2 * margin, markup.height + 2 * margin),
            (0, 0, 0, 0),
        )
        for tile in markup.tiles:
            stamp = stamps[tile.style_key]
            canvas.alpha_composite(
                stamp,
                (
                    margin + math.floor(tile.center_x - stamp.width / 2),
                    margin + math.floor(tile.center_y - stamp.height / 2),
                ),
            )
        overlay = canvas.crop((margin, margin, margin + markup.width, margin + markup.height))
    except AppException:
        raise
    except (OSError, ValueError) as e:
        logger.error(f"叠加层栅格化失败: {e}")
        raise EncodeError(f"叠加层栅格化失败: {e}") from e

    return overlay


def blend_overlay(
    base: Image.Image,
    overlay: Image.Image,
    mode: BlendMode = BlendMode.OVER,
) -> Image.Image:
    """把叠加层混合到底图上.

    OVER 为普通 alpha 叠加；OVERLAY 先做叠加混合，再按叠加层 alpha 与底图合成。

    Args:
        base: 底图
        overlay: RGBA 叠加层，尺寸与底图一致
        mode: 混合模式

    Returns:
        RGBA 模式的合成结果

    Raises:
        EncodeError: 尺寸不一致或色彩模式无法转换
    """
    if base.size != overlay.size:
        raise EncodeError(f"叠加层尺寸 {overlay.size} 与底图 {base.size} 不一致")

    try:
        base_rgba = ensure_rgba(base)
        overlay_rgba = ensure_rgba(overlay)

        if mode == BlendMode.OVER:
            return Image.alpha_composite(base_rgba, overlay_rgba)

        base_rgb = base_rgba.convert("RGB")
        blended = ImageChops.overlay(base_rgb, overlay_rgba.convert("RGB"))
        result = Image.composite(blended, base_rgb, overlay_rgba.getchannel("A"))
        result.putalpha(base_rgba.getchannel("A"))
        return result
    except (ValueError, OSError) as e:
        raise EncodeError(f"叠加层混合失败: {e}") from e


class WatermarkCompositor:
    """平铺水印合成器.

    无状态，可在多个线程中并发调用。

    Attributes:
        config: 水印配置
        font: 内嵌字体

    Example:
        >>> compositor = WatermarkCompositor()
        >>> result = compositor.apply_watermark(image_bytes)
        >>> result.metadata.width, len(result.watermarked_bytes)
    """

    def __init__(
        self,
        config: Optional[WatermarkConfig] = None,
        font: Optional[WatermarkFont] = WATERMARK_FONT,
    ) -> None:
        """初始化合成器.

        Args:
            config: 水印配置，默认使用 WatermarkConfig()
            font: 内嵌字体，None 表示使用系统字体
        """
        self._config = config or WatermarkConfig()
        self._font = font

    @property
    def config(self) -> WatermarkConfig:
        """水印配置."""
        return self._config

    @property
    def font(self) -> Optional[WatermarkFont]:
        """内嵌字体."""
        return self._font

    def read_metadata(self, source: bytes) -> ImageMetadata:
        """只读取文件头，获取源图片元数据.

        Raises:
            DecodeError: 数据为空、无法识别或格式不支持
        """
        width, height, fmt = read_image_header(source)
        return ImageMetadata(width=width, height=height, format=fmt, size=len(source))

    def compute_layout(self, width: int, height: int) -> TileLayout:
        """计算平铺布局."""
        return compute_tile_layout(width, height, self._config)

    def build_overlay(self, layout: TileLayout) -> OverlayMarkup:
        """根据布局生成叠加层."""
        return build_overlay_markup(layout, self._config, self._font)

    def apply_watermark(self, source: bytes) -> WatermarkResult:
        """为图片添加平铺水印.

        Args:
            source: 源图片字节数据（JPEG / PNG / WEBP）

        Returns:
            WatermarkResult，包含 JPEG 字节数据和源图片元数据

        Raises:
            DecodeError: 源数据无法解码
            EncodeError: 合成或重新编码失败
        """
        metadata = self.read_metadata(source)
        logger.info(
            f"开始添加水印: {metadata.format} {metadata.width}x{metadata.height}, "
            f"{metadata.size} bytes"
        )

        layout = self.compute_layout(metadata.width, metadata.height)
        markup = self.build_overlay(layout)

        try:
            with decode_image(source) as image:
                overlay = rasterize_overlay(markup)
                composited = blend_overlay(image, overlay, self._config.blend_mode)
            output = encode_image(
                composited, OUTPUT_FORMAT, self._config.output_quality
            )
        except AppException:
            raise
        except Exception as e:
            logger.exception(f"水印合成失败: {e}")
            raise EncodeError(f"水印合成失败: {e}") from e

        logger.info(
            f"水印添加完成: {layout.tile_count} 个平铺单元, 输出 {len(output)} bytes"
        )
        return WatermarkResult(
            watermarked_bytes=output,
            metadata=metadata,
            layout=layout,
            output_format=OUTPUT_FORMAT,
            quality=self._config.output_quality,
        )

    async def apply_watermark_async(
        self,
        source: bytes,
        executor: Optional[Executor] = None,
    ) -> WatermarkResult:
        """在线程池中执行 apply_watermark，避免阻塞事件循环.

        Args:
            source: 源图片字节数据
            executor: 线程池，None 使用事件循环默认线程池
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self.apply_watermark, source)


def apply_watermark(
    source: bytes,
    config: Optional[WatermarkConfig] = None,
) -> tuple[bytes, ImageMetadata]:
    """便捷函数：添加平铺水印.

    Args:
        source: 源图片字节数据
        config: 水印配置

    Returns:
        (水印图片字节数据, 源图片元数据) 元组
    """
    result = WatermarkCompositor(config).apply_watermark(source)
    return result.watermarked_bytes, result.metadata
