"""水印平铺布局计算.

根据图片尺寸计算平铺网格：平铺尺寸、字号以及每个平铺单元的锚点。
布局只依赖宽高和配置，同样的输入总是得到同样的网格。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from gallery_watermark.models.watermark_config import WatermarkConfig
from gallery_watermark.utils.exceptions import ConfigurationError
from gallery_watermark.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class TileAnchor:
    """平铺单元锚点."""

    x: int  # 单元左上角 X
    y: int  # 单元左上角 Y
    center_x: float  # 文字中心 X
    center_y: float  # 文字中心 Y


@dataclass(frozen=True)
class TileLayout:
    """平铺布局.

    Attributes:
        width: 画布宽度
        height: 画布高度
        tile_size: 平铺单元边长（像素）
        font_size: 字号
        rotation: 旋转角度（度）
        anchors: 按行优先排列的锚点
    """

    width: int
    height: int
    tile_size: int
    font_size: int
    rotation: float
    anchors: tuple[TileAnchor, ...]

    @property
    def columns(self) -> int:
        """列数."""
        return math.ceil(self.width / self.tile_size)

    @property
    def rows(self) -> int:
        """行数."""
        return math.ceil(self.height / self.tile_size)

    @property
    def tile_count(self) -> int:
        """平铺单元数量."""
        return len(self.anchors)

    def __iter__(self) -> Iterator[TileAnchor]:
        return iter(self.anchors)


def count_tiles(width: int, height: int, tile_size: int) -> int:
    """计算给定平铺尺寸下的单元数量."""
    return math.ceil(width / tile_size) * math.ceil(height / tile_size)


def _fit_tile_size(width: int, height: int, tile_size: int, max_tile_count: int) -> int:
    """放大平铺尺寸直到单元数量不超过上限.

    单元数量随平铺尺寸单调不增，二分查找满足上限的最小尺寸。
    """
    if count_tiles(width, height, tile_size) <= max_tile_count:
        return tile_size

    low, high = tile_size, max(width, height)
    while low < high:
        mid = (low + high) // 2
        if count_tiles(width, height, mid) <= max_tile_count:
            high = mid
        else:
            low = mid + 1
    return low


def compute_tile_size(width: int, config: WatermarkConfig) -> int:
    """计算基础平铺尺寸（未应用数量上限）.

    Args:
        width: 图片宽度
        config: 水印配置

    Returns:
        平铺尺寸，不小于 config.min_tile_size
    """
    return max(config.min_tile_size, width // config.tile_divisor)


def compute_font_size(tile_size: int, config: WatermarkConfig) -> int:
    """根据平铺尺寸计算字号，最小为 1."""
    return max(1, math.floor(tile_size / config.font_size_ratio))


def compute_tile_layout(width: int, height: int, config: WatermarkConfig) -> TileLayout:
    """计算平铺布局.

    Args:
        width: 图片宽度（像素）
        height: 图片高度（像素）
        config: 水印配置

    Returns:
        TileLayout 实例

    Raises:
        ConfigurationError: 尺寸无效
    """
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"画布尺寸无效: {width}x{height}")

    tile_size = compute_tile_size(width, config)
    fitted = _fit_tile_size(width, height, tile_size, config.max_tile_count)
    if fitted != tile_size:
        logger.warning(
            f"平铺数量超过上限 {config.max_tile_count}，"
            f"平铺尺寸由 {tile_size} 调整为 {fitted} ({width}x{height})"
        )
        tile_size = fitted

    half = tile_size / 2
    anchors = tuple(
        TileAnchor(x=x, y=y, center_x=x + half, center_y=y + half)
        for y in range(0, height, tile_size)
        for x in range(0, width, tile_size)
    )

    layout = TileLayout(
        width=width,
        height=height,
        tile_size=tile_size,
        font_size=compute_font_size(tile_size, config),
        rotation=config.rotation_angle,
        anchors=anchors,
    )
    logger.debug(
        f"平铺布局: {width}x{height}, 平铺尺寸 {tile_size}, "
        f"字号 {layout.font_size}, {layout.columns}x{layout.rows}={layout.tile_count}"
    )
    return layout
