"""应用设置模型."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gallery_watermark.models.watermark_config import BlendMode, WatermarkConfig
from gallery_watermark.utils.constants import (
    DEFAULT_IMAGE_HOST_URL,
    DEFAULT_WORKER_THREADS,
    HTTP_TIMEOUT,
    LOG_DIR,
    MAX_UPLOAD_SIZE,
    UPLOAD_MAX_RETRIES,
    UPLOAD_RETRY_DELAY,
)


class Settings(BaseSettings):
    """应用设置.

    支持从环境变量和 .env 文件加载配置。

    Attributes:
        log_level: 日志级别
        log_dir: 日志目录
        max_upload_size: 最大上传字节数
        worker_threads: 水印处理线程数
        http_timeout: HTTP 请求超时（秒）
        upload_max_retries: 图床上传最大重试次数
        upload_retry_delay: 图床上传初始重试延迟（秒）
        image_host_url: 图床上传地址
        image_host_api_key: 图床 API 密钥
        font_path: 自定义水印字体路径
        watermark_config_file: 水印配置 JSON 文件路径
        watermark_*: 水印参数覆盖项
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 应用配置
    log_level: str = Field(
        default="INFO",
        description="日志级别",
    )

    log_dir: Path = Field(
        default=LOG_DIR,
        description="日志目录",
    )

    max_upload_size: int = Field(
        default=MAX_UPLOAD_SIZE,
        ge=1,
        description="最大上传字节数",
    )

    worker_threads: int = Field(
        default=DEFAULT_WORKER_THREADS,
        ge=1,
        le=64,
        description="水印处理线程数",
    )

    # 远程服务配置
    http_timeout: float = Field(
        default=HTTP_TIMEOUT,
        gt=0,
        description="HTTP 请求超时（秒）",
    )

    upload_max_retries: int = Field(
        default=UPLOAD_MAX_RETRIES,
        ge=0,
        le=10,
        description="图床上传最大重试次数",
    )

    upload_retry_delay: float = Field(
        default=UPLOAD_RETRY_DELAY,
        ge=0,
        description="图床上传初始重试延迟（秒）",
    )

    image_host_url: str = Field(
        default=DEFAULT_IMAGE_HOST_URL,
        description="图床上传地址",
    )

    image_host_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="图床 API 密钥",
    )

    # 水印配置
    font_path: Optional[Path] = Field(
        default=None,
        description="自定义水印字体路径",
    )

    watermark_config_file: Optional[Path] = Field(
        default=None,
        description="水印配置 JSON 文件路径",
    )

    watermark_tile_divisor: Optional[int] = Field(default=None, description="平铺除数")
    watermark_font_size_ratio: Optional[float] = Field(default=None, description="字号比例")
    watermark_rotation_angle: Optional[float] = Field(default=None, description="旋转角度")
    watermark_output_quality: Optional[int] = Field(default=None, description="输出质量")
    watermark_blend_mode: Optional[BlendMode] = Field(default=None, description="混合模式")
    watermark_label_text: Optional[str] = Field(default=None, description="水印文字")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"无效的日志级别: {v}，有效值: {valid_levels}")
        return upper_v

    @property
    def has_image_host_key(self) -> bool:
        """是否配置了图床密钥."""
        return bool(self.image_host_api_key.get_secret_value())

    def watermark_overrides(self) -> dict:
        """收集环境变量中设置的水印参数覆盖项."""
        prefix = "watermark_"
        return {
            name[len(prefix):]: getattr(self, name)
            for name in type(self).model_fields
            if name.startswith(prefix)
            and name != "watermark_config_file"
            and getattr(self, name) is not None
        }

    def build_watermark_config(self) -> WatermarkConfig:
        """根据环境变量覆盖项构建水印配置.

        Raises:
            ConfigurationError: 覆盖值无效
        """
        return WatermarkConfig.from_overrides(**self.watermark_overrides())
