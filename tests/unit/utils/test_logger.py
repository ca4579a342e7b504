"""日志工具单元测试."""

from __future__ import annotations

import logging

import pytest

from gallery_watermark.utils.logger import (
    PACKAGE_LOGGER,
    configure_logging,
    get_log_level_name,
    reset_logging,
    set_log_level,
    setup_logger,
)


@pytest.fixture(autouse=True)
def clean_logging():
    """每个测试后移除安装的处理器并恢复级别."""
    yield
    reset_logging()
    set_log_level("INFO")


def _active_handlers() -> list[logging.Handler]:
    return [
        handler
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers
        if not isinstance(handler, logging.NullHandler)
    ]


def _flush() -> None:
    for handler in _active_handlers():
        handler.flush()


class TestSetupLogger:
    """测试 setup_logger."""

    def test_no_handlers_without_configure(self) -> None:
        """测试获取日志记录器不安装处理器."""
        logger = setup_logger("gallery_watermark.demo")

        assert logger.name == "gallery_watermark.demo"
        assert logger.handlers == []
        assert _active_handlers() == []


class TestConfigureLogging:
    """测试 configure_logging."""

    def test_writes_log_files(self, tmp_path) -> None:
        """测试写入 app.log 和 error.log."""
        log_dir = tmp_path / "logs"
        configure_logging(log_dir, "DEBUG", console=False)
        logger = setup_logger("gallery_watermark.demo")

        logger.debug("调试信息")
        logger.error("出错了")
        _flush()

        app_log = (log_dir / "app.log").read_text(encoding="utf-8")
        error_log = (log_dir / "error.log").read_text(encoding="utf-8")
        assert "调试信息" in app_log
        assert "出错了" in app_log
        assert "调试信息" not in error_log
        assert "出错了" in error_log

    def test_reconfigure_replaces_handlers(self, tmp_path) -> None:
        """测试重复配置不累积处理器."""
        configure_logging(tmp_path / "logs")
        first = len(_active_handlers())
        configure_logging(tmp_path / "logs")

        assert first == 3
        assert len(_active_handlers()) == first

    def test_unwritable_log_dir(self, tmp_path) -> None:
        """测试日志目录无法创建时只输出到控制台."""
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        configure_logging(blocker / "logs")

        [handler] = _active_handlers()
        assert isinstance(handler, logging.StreamHandler)
        assert not (blocker / "logs").exists()

    def test_no_log_dir(self) -> None:
        """测试 log_dir 为 None 时不写文件."""
        configure_logging(None)

        [handler] = _active_handlers()
        assert not isinstance(handler, logging.FileHandler)

    def test_reset_restores_propagation(self, tmp_path) -> None:
        """测试重置后恢复向上传播."""
        configure_logging(tmp_path / "logs", console=False)
        assert logging.getLogger(PACKAGE_LOGGER).propagate is False

        reset_logging()

        assert _active_handlers() == []
        assert logging.getLogger(PACKAGE_LOGGER).propagate is True


class TestLogLevel:
    """测试全局日志级别."""

    def test_set_log_level_keeps_error_handler(self, tmp_path) -> None:
        """测试调整级别时错误日志处理器保持 ERROR."""
        configure_logging(tmp_path / "logs", console=False)

        set_log_level("DEBUG")

        levels = sorted(handler.level for handler in _active_handlers())
        assert levels == [logging.DEBUG, logging.ERROR]
        assert get_log_level_name() == "DEBUG"
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        """测试无法识别的级别名."""
        set_log_level("LOUD")

        assert get_log_level_name() == "INFO"
