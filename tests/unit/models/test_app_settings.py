"""应用设置单元测试."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gallery_watermark.models.app_settings import Settings
from gallery_watermark.models.watermark_config import BlendMode
from gallery_watermark.utils.exceptions import ConfigurationError


@pytest.mark.usefixtures("isolated_env")
class TestSettings:
    """测试 Settings."""

    def test_defaults(self) -> None:
        """测试默认值."""
        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.max_upload_size == 5 * 1024 * 1024
        assert settings.image_host_url == "https://api.imgbb.com/1/upload"
        assert not settings.has_image_host_key
        assert settings.watermark_overrides() == {}

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """测试环境变量覆盖."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("IMAGE_HOST_API_KEY", "secret")
        monkeypatch.setenv("WATERMARK_TILE_DIVISOR", "6")
        monkeypatch.setenv("WATERMARK_BLEND_MODE", "overlay")

        settings = Settings()

        assert settings.log_level == "DEBUG"
        assert settings.has_image_host_key
        assert "secret" not in repr(settings)
        assert settings.watermark_overrides() == {
            "tile_divisor": 6,
            "blend_mode": BlendMode.OVERLAY,
        }

    def test_log_dir_from_env(self, isolated_env) -> None:
        """测试日志目录读取 LOG_DIR."""
        assert Settings().log_dir == isolated_env / "logs"

    def test_dotenv_file(self, isolated_env) -> None:
        """测试从 .env 文件加载."""
        (isolated_env / ".env").write_text(
            "WATERMARK_LABEL_TEXT=DEMO\nMAX_UPLOAD_SIZE=1024\n", encoding="utf-8"
        )
        settings = Settings()

        assert settings.max_upload_size == 1024
        assert settings.build_watermark_config().label_text == "DEMO"

    def test_invalid_log_level(self) -> None:
        """测试无效日志级别."""
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_invalid_watermark_override(self) -> None:
        """测试无效水印覆盖项."""
        settings = Settings(watermark_tile_divisor=0)
        with pytest.raises(ConfigurationError):
            settings.build_watermark_config()
