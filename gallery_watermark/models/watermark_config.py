"""水印配置模型."""

from __future__ import annotations

from enum import Enum
from typing import Any

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gallery_watermark.utils.constants import (
    DEFAULT_FILL_COLOR,
    DEFAULT_FILL_OPACITY,
    DEFAULT_FONT_SIZE_RATIO,
    DEFAULT_FONT_WEIGHT,
    DEFAULT_LABEL_TEXT,
    DEFAULT_OUTPUT_QUALITY,
    DEFAULT_ROTATION_ANGLE,
    DEFAULT_STROKE_COLOR,
    DEFAULT_STROKE_OPACITY,
    DEFAULT_STROKE_WIDTH,
    DEFAULT_TILE_DIVISOR,
    MAX_OUTPUT_QUALITY,
    MAX_TILE_COUNT,
    MIN_OUTPUT_QUALITY,
    MIN_TILE_SIZE,
)
from gallery_watermark.utils.exceptions import ConfigurationError, InvalidConfigValueError


class BlendMode(str, Enum):
    """叠加层混合模式枚举."""

    OVER = "over"  # 普通 alpha 叠加，明暗背景上效果一致
    OVERLAY = "overlay"  # 叠加混合，可见度随底图明暗变化


# 混合模式中文名称
BLEND_MODE_NAMES: dict[BlendMode, str] = {
    BlendMode.OVER: "普通叠加",
    BlendMode.OVERLAY: "叠加混合",
}


class WatermarkConfig(BaseModel):
    """平铺水印配置.

    所有参数都有默认值，同一张图片的首次生成和后续重新生成应使用同一份配置，
    保证水印网格一致。

    Attributes:
        tile_divisor: 平铺除数，平铺尺寸 = 图片宽度 // 除数
        font_size_ratio: 字号比例，字号 = 平铺尺寸 // 比例
        rotation_angle: 文字旋转角度（度）
        fill_color: 文字填充颜色
        fill_opacity: 填充不透明度
        stroke_color: 描边颜色
        stroke_width: 描边宽度
        stroke_opacity: 描边不透明度
        font_weight: 字重
        output_quality: 输出 JPEG 质量
        blend_mode: 混合模式
        label_text: 水印文字
        min_tile_size: 平铺尺寸下限
        max_tile_count: 平铺数量上限
        embed_font: 是否在叠加层中内嵌字体

    Example:
        >>> config = WatermarkConfig.from_overrides(tile_divisor=6, label_text="DEMO")
        >>> config.tile_divisor
        6
    """

    model_config = ConfigDict(frozen=True)

    # 平铺布局
    tile_divisor: int = Field(
        default=DEFAULT_TILE_DIVISOR,
        gt=0,
        description="平铺除数",
    )
    font_size_ratio: float = Field(
        default=DEFAULT_FONT_SIZE_RATIO,
        gt=0,
        description="字号比例",
    )
    rotation_angle: float = Field(
        default=DEFAULT_ROTATION_ANGLE,
        ge=-360,
        le=360,
        description="文字旋转角度（度）",
    )
    min_tile_size: int = Field(
        default=MIN_TILE_SIZE,
        ge=1,
        description="平铺尺寸下限（像素）",
    )
    max_tile_count: int = Field(
        default=MAX_TILE_COUNT,
        ge=1,
        description="平铺数量上限",
    )

    # 文字样式
    label_text: str = Field(
        default=DEFAULT_LABEL_TEXT,
        min_length=1,
        max_length=100,
        description="水印文字",
    )
    fill_color: str = Field(
        default=DEFAULT_FILL_COLOR,
        description="文字填充颜色",
    )
    fill_opacity: float = Field(
        default=DEFAULT_FILL_OPACITY,
        ge=0,
        le=1,
        description="填充不透明度",
    )
    stroke_color: str = Field(
        default=DEFAULT_STROKE_COLOR,
        description="描边颜色",
    )
    stroke_width: float = Field(
        default=DEFAULT_STROKE_WIDTH,
        ge=0,
        description="描边宽度",
    )
    stroke_opacity: float = Field(
        default=DEFAULT_STROKE_OPACITY,
        ge=0,
        le=1,
        description="描边不透明度",
    )
    font_weight: int = Field(
        default=DEFAULT_FONT_WEIGHT,
        ge=100,
        le=900,
        description="字重",
    )
    embed_font: bool = Field(
        default=True,
        description="是否内嵌字体",
    )

    # 输出
    blend_mode: BlendMode = Field(
        default=BlendMode.OVER,
        description="混合模式",
    )
    output_quality: int = Field(
        default=DEFAULT_OUTPUT_QUALITY,
        ge=MIN_OUTPUT_QUALITY,
        le=MAX_OUTPUT_QUALITY,
        description="输出 JPEG 质量 (90-95)",
    )

    @field_validator("fill_color", "stroke_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """验证颜色值（CSS 颜色名或 HEX）."""
        v = v.strip()
        try:
            ImageColor.getrgb(v)
        except ValueError:
            raise ValueError(f"无法识别的颜色: {v}")
        return v

    @field_validator("label_text")
    @classmethod
    def validate_label_text(cls, v: str) -> str:
        """验证水印文字."""
        if not v.strip():
            raise ValueError("水印文字不能为空白")
        return v

    @classmethod
    def from_overrides(cls, **overrides: Any) -> "WatermarkConfig":
        """在默认配置基础上覆盖部分参数.

        值为 None 的参数会被忽略。

        Args:
            **overrides: 要覆盖的参数

        Returns:
            WatermarkConfig 实例

        Raises:
            ConfigurationError: 参数无效
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            raise _to_configuration_error(e) from e

    def with_overrides(self, **overrides: Any) -> "WatermarkConfig":
        """基于当前配置生成新配置."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_overrides(**values)

    def to_json(self) -> str:
        """转换为 JSON 字符串."""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "WatermarkConfig":
        """从 JSON 字符串创建.

        Raises:
            ConfigurationError: JSON 格式错误或参数无效
        """
        try:
            return cls.model_validate_json(json_str)
        except ValidationError as e:
            raise _to_configuration_error(e) from e


def _to_configuration_error(error: ValidationError) -> ConfigurationError:
    """将 pydantic 校验错误转换为配置异常."""
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ())) or "config"
    return InvalidConfigValueError(loc, first.get("input"), first.get("msg", ""))
