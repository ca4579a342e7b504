"""水印叠加层单元测试."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from gallery_watermark.core.overlay_markup import (
    GENERIC_FONT_FAMILY,
    build_overlay_markup,
    format_number,
)
from gallery_watermark.core.tile_layout import compute_tile_layout
from gallery_watermark.models.watermark_config import WatermarkConfig
from gallery_watermark.utils.font_loader import WATERMARK_FONT

SVG = "{http://www.w3.org/2000/svg}"


def _markup(width: int, height: int, config: WatermarkConfig, font=WATERMARK_FONT):
    layout = compute_tile_layout(width, height, config)
    return build_overlay_markup(layout, config, font)


# ===================
# 数值格式化测试
# ===================
class TestFormatNumber:
    """测试坐标格式化."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (150.0, "150"),
            (0.5, "0.5"),
            (-30.0, "-30"),
            (0.45, "0.45"),
            (0.0, "0"),
            (1000000.5, "1000000.5"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        """测试整数去掉小数点、小数保留有效位."""
        assert format_number(value) == expected


# ===================
# SVG 文档测试
# ===================
class TestOverlayMarkup:
    """测试 SVG 叠加层."""

    def test_document_sized_to_image(self, default_config: WatermarkConfig) -> None:
        """测试 SVG 尺寸与图片一致."""
        root = ET.fromstring(_markup(1200, 800, default_config).to_svg())

        assert root.tag == f"{SVG}svg"
        assert root.get("width") == "1200"
        assert root.get("height") == "800"

    def test_one_text_per_tile(self, default_config: WatermarkConfig) -> None:
        """测试每个平铺单元对应一个 text 元素."""
        markup = _markup(1200, 800, default_config)
        root = ET.fromstring(markup.to_svg())

        texts = root.findall(f"{SVG}text")
        assert markup.tile_count == 12
        assert len(texts) == 12

    def test_text_attributes(self, default_config: WatermarkConfig) -> None:
        """测试文字位置、旋转和样式."""
        root = ET.fromstring(_markup(1200, 800, default_config).to_svg())
        first = root.find(f"{SVG}text")

        assert first.get("x") == "150"
        assert first.get("y") == "150"
        assert first.get("transform") == "rotate(-30, 150, 150)"
        assert first.get("font-size") == "100"
        assert first.get("fill") == "white"
        assert first.get("fill-opacity") == "0.6"
        assert first.get("stroke") == "black"
        assert first.get("stroke-width") == "2"
        assert first.get("stroke-opacity") == "0.45"
        assert first.get("text-anchor") == "middle"
        assert first.text == "GALLERY"

    def test_half_pixel_centers(self) -> None:
        """测试奇数平铺尺寸的中心点保留 .5."""
        config = WatermarkConfig(tile_divisor=5)
        root = ET.fromstring(_markup(15, 15, config).to_svg())
        first = root.find(f"{SVG}text")

        assert first.get("x") == "1.5"
        assert first.get("transform") == "rotate(-30, 1.5, 1.5)"

    def test_label_is_escaped(self) -> None:
        """测试水印文字中的特殊字符被转义."""
        config = WatermarkConfig(label_text='<A & "B">')
        svg = _markup(100, 100, config).to_svg()
        root = ET.fromstring(svg)

        assert root.find(f"{SVG}text").text == '<A & "B">'
        assert "&lt;A &amp;" in svg

    def test_embedded_font_face(self, default_config: WatermarkConfig) -> None:
        """测试内嵌字体声明."""
        markup = _markup(400, 400, default_config)
        svg = markup.to_svg()
        root = ET.fromstring(svg)

        assert "@font-face" in svg
        assert "data:font/truetype;base64," in svg
        assert root.find(f"{SVG}text").get("font-family") == (
            f"WatermarkFont, {GENERIC_FONT_FAMILY}"
        )

    def test_font_not_embedded_when_disabled(self) -> None:
        """测试关闭内嵌字体后只使用通用字体."""
        config = WatermarkConfig(embed_font=False)
        markup = _markup(400, 400, config)
        svg = markup.to_svg()

        assert markup.font is None
        assert "@font-face" not in svg
        assert f'font-family="{GENERIC_FONT_FAMILY}"' in svg

    def test_no_font_available(self, default_config: WatermarkConfig) -> None:
        """测试未提供字体时不生成声明."""
        svg = _markup(400, 400, default_config, font=None).to_svg()
        assert "@font-face" not in svg

    def test_markup_is_deterministic(self, default_config: WatermarkConfig) -> None:
        """测试同样的尺寸和配置生成完全相同的 SVG."""
        first = _markup(1024, 768, default_config)
        second = _markup(1024, 768, default_config)

        assert first == second
        assert first.to_svg() == second.to_svg()

    def test_to_bytes_is_utf8(self) -> None:
        """测试 UTF-8 编码输出."""
        config = WatermarkConfig(label_text="画廊")
        markup = _markup(100, 100, config)
        assert "画廊".encode("utf-8") in markup.to_bytes()
