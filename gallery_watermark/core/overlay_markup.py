"""水印叠加层描述.

把平铺布局转换为一组文字描述。栅格化直接读取这些描述；也可以序列化为
与图片同尺寸的 SVG 文档导出。
输出中不包含时间戳或随机值，同样的布局总是生成同样的字符串。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from xml.sax.saxutils import escape, quoteattr

from gallery_watermark.core.tile_layout import TileLayout
from gallery_watermark.models.watermark_config import WatermarkConfig
from gallery_watermark.utils.font_loader import WatermarkFont

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

# 内嵌字体不可用时的通用字体
GENERIC_FONT_FAMILY = "sans-serif"


def format_number(value: float) -> str:
    """格式化坐标数值，整数不带小数点."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


@dataclass(frozen=True)
class TextTile:
    """单个水印文字描述."""

    center_x: float
    center_y: float
    rotation: float
    font_size: int
    font_family: str
    font_weight: int
    fill: str
    fill_opacity: float
    stroke: str
    stroke_width: float
    stroke_opacity: float
    label: str

    @property
    def style_key(self) -> tuple:
        """除位置外的全部绘制参数，相同则栅格结果相同."""
        return (
            self.rotation, self.font_size, self.font_family, self.font_weight,
            self.fill, self.fill_opacity, self.stroke, self.stroke_width,
            self.stroke_opacity, self.label,
        )

    def to_svg(self) -> str:
        """序列化为 SVG text 元素."""
        cx = format_number(self.center_x)
        cy = format_number(self.center_y)
        attrs = [
            ("x", cx),
            ("y", cy),
            ("text-anchor", "middle"),
            ("dominant-baseline", "middle"),
            ("font-size", str(self.font_size)),
            ("font-family", self.font_family),
            ("font-weight", str(self.font_weight)),
            ("fill", self.fill),
            ("fill-opacity", format_number(self.fill_opacity)),
            ("stroke", self.stroke),
            ("stroke-width", format_number(self.stroke_width)),
            ("stroke-opacity", format_number(self.stroke_opacity)),
            ("transform", f"rotate({format_number(self.rotation)}, {cx}, {cy})"),
        ]
        rendered = " ".join(f"{name}={quoteattr(value)}" for name, value in attrs)
        return f"<text {rendered}>{escape(self.label)}</text>"


@dataclass(frozen=True)
class OverlayMarkup:
    """水印叠加层.

    Attributes:
        width: 文档宽度，与图片一致
        height: 文档高度，与图片一致
        tiles: 按行优先排列的文字描述
        font: 内嵌字体，None 表示使用系统字体
    """

    width: int
    height: int
    tiles: tuple[TextTile, ...]
    font: Optional[WatermarkFont] = None

    @property
    def tile_count(self) -> int:
        """文字数量."""
        return len(self.tiles)

    def _font_face(self) -> str:
        """生成 @font-face 声明."""
        if self.font is None:
            return ""
        return (
            "<defs><style>"
            f"@font-face {{ font-family: '{self.font.family}'; "
            f"src: url({self.font.data_uri}) format('{self.font.css_format}'); }}"
            "</style></defs>"
        )

    def to_svg(self) -> str:
        """序列化为完整 SVG 文档."""
        parts = [
            f'<svg xmlns="{SVG_NAMESPACE}" width="{self.width}" height="{self.height}" '
            f'viewBox="0 0 {self.width} {self.height}">'
        ]
        font_face = self._font_face()
        if font_face:
            parts.append(font_face)
        parts.extend(tile.to_svg() for tile in self.tiles)
        parts.append("</svg>")
        return "\n".join(parts)

    def to_bytes(self) -> bytes:
        """UTF-8 编码的 SVG 文档."""
        return self.to_svg().encode("utf-8")


def build_overlay_markup(
    layout: TileLayout,
    config: WatermarkConfig,
    font: Optional[WatermarkFont] = None,
) -> OverlayMarkup:
    """根据平铺布局构建叠加层.

    Args:
        layout: 平铺布局
        config: 水印配置
        font: 内嵌字体，仅在 config.embed_font 为真时使用

    Returns:
        OverlayMarkup 实例
    """
    embedded = font if config.embed_font else None
    if embedded is not None:
        font_family = f"{embedded.family}, {GENERIC_FONT_FAMILY}"
    else:
        font_family = GENERIC_FONT_FAMILY

    tiles = tuple(
        TextTile(
            center_x=anchor.center_x,
            center_y=anchor.center_y,
            rotation=layout.rotation,
            font_size=layout.font_size,
            font_family=font_family,
            font_weight=config.font_weight,
            fill=config.fill_color,
            fill_opacity=config.fill_opacity,
            stroke=config.stroke_color,
            stroke_width=config.stroke_width,
            stroke_opacity=config.stroke_opacity,
            label=config.label_text,
        )
        for anchor in layout
    )
    return OverlayMarkup(
        width=layout.width,
        height=layout.height,
        tiles=tiles,
        font=embedded,
    )
