"""核心业务逻辑模块."""

from gallery_watermark.core.overlay_markup import (
    OverlayMarkup,
    TextTile,
    build_overlay_markup,
)
from gallery_watermark.core.tile_layout import (
    TileAnchor,
    TileLayout,
    compute_tile_layout,
    count_tiles,
)
from gallery_watermark.core.watermark_compositor import (
    WatermarkCompositor,
    WatermarkResult,
    apply_watermark,
    blend_overlay,
    rasterize_overlay,
)

__all__ = [
    # 平铺布局
    "TileAnchor",
    "TileLayout",
    "compute_tile_layout",
    "count_tiles",
    # 叠加层
    "OverlayMarkup",
    "TextTile",
    "build_overlay_markup",
    # 合成器
    "WatermarkCompositor",
    "WatermarkResult",
    "apply_watermark",
    "blend_overlay",
    "rasterize_overlay",
]
