"""配置管理器模块."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from gallery_watermark.models.app_settings import Settings
from gallery_watermark.models.watermark_config import WatermarkConfig
from gallery_watermark.utils.exceptions import ConfigurationError
from gallery_watermark.utils.font_loader import WATERMARK_FONT, WatermarkFont, load_font
from gallery_watermark.utils.logger import set_log_level, setup_logger

logger = setup_logger(__name__)


class ConfigManager:
    """配置管理器.

    负责应用设置、水印配置和水印字体的加载。

    Attributes:
        settings: 应用设置
        watermark_config: 水印配置
        font: 水印字体
    """

    _instance: Optional["ConfigManager"] = None

    def __new__(cls) -> "ConfigManager":
        """单例模式."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """初始化配置管理器."""
        if self._initialized:
            return

        self._settings: Optional[Settings] = None
        self._watermark_config: Optional[WatermarkConfig] = None
        self._font: Optional[WatermarkFont] = None
        self._initialized = True

        logger.debug("配置管理器初始化完成")

    @property
    def settings(self) -> Settings:
        """获取应用设置."""
        if self._settings is None:
            self._settings = self._load_settings()
        return self._settings

    @property
    def watermark_config(self) -> WatermarkConfig:
        """获取水印配置."""
        if self._watermark_config is None:
            self._watermark_config = self._load_watermark_config()
        return self._watermark_config

    @property
    def font(self) -> WatermarkFont:
        """获取水印字体."""
        if self._font is None:
            font_path = self.settings.font_path
            self._font = load_font(font_path) if font_path else WATERMARK_FONT
        return self._font

    def _load_settings(self) -> Settings:
        """加载应用设置.

        Returns:
            Settings 实例

        Raises:
            ConfigurationError: 环境变量或 .env 中的值无效
        """
        try:
            settings = Settings()
        except ValidationError as e:
            logger.error(f"加载应用设置失败: {e}")
            raise ConfigurationError(f"加载应用设置失败: {e}") from e

        set_log_level(settings.log_level)
        logger.debug(f"应用设置加载完成: log_level={settings.log_level}")
        return settings

    def _load_watermark_config(self) -> WatermarkConfig:
        """加载水印配置.

        配置文件存在时以文件为基础，环境变量中的覆盖项优先。

        Returns:
            WatermarkConfig 实例
        """
        settings = self.settings
        config_file = settings.watermark_config_file

        if config_file is None:
            return settings.build_watermark_config()

        try:
            content = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"无法读取水印配置文件 {config_file}: {e}") from e

        config = WatermarkConfig.from_json(content)
        logger.debug(f"从文件加载水印配置: {config_file}")
        return config.with_overrides(**settings.watermark_overrides())

    def reload(self) -> None:
        """重新加载所有配置."""
        self._settings = None
        self._watermark_config = None
        self._font = None
        logger.info("配置已重新加载")


def get_config() -> ConfigManager:
    """获取配置管理器实例.

    Returns:
        ConfigManager 单例实例
    """
    return ConfigManager()


def reset_config() -> None:
    """重置配置管理器单例（主要用于测试）."""
    ConfigManager._instance = None
