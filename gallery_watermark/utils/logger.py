"""日志工具模块.

包内模块通过 setup_logger 获取日志记录器，导入时不安装任何处理器、
不创建日志目录；由命令行入口调用 configure_logging 输出到控制台和轮转日志文件。

Features:
    - 控制台彩色输出（stderr）
    - 文件日志轮转，错误单独记录
    - 全局日志级别管理
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from gallery_watermark.utils.constants import LOG_DIR

# 包日志记录器名称，所有模块日志记录器都是它的子记录器
PACKAGE_LOGGER = "gallery_watermark"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUP_COUNT = 5

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
COLOR_RESET = "\033[0m"

_log_level: int = logging.INFO
_installed_handlers: list[logging.Handler] = []
# 级别跟随全局设置的处理器（不含错误日志）
_level_handlers: list[logging.Handler] = []

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


class ColoredFormatter(logging.Formatter):
    """按级别给级别名着色的格式化器."""

    def format(self, record: logging.LogRecord) -> str:
        """格式化日志记录."""
        # 在副本上着色，原记录还要交给文件处理器
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = (
            f"{LEVEL_COLORS.get(record.levelno, '')}{record.levelname}{COLOR_RESET}"
        )
        return super().format(colored)


def _parse_level(level: int | str) -> int:
    """日志级别名转换为数值，无法识别时使用 INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _file_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logger(name: str) -> logging.Logger:
    """获取日志记录器.

    Args:
        name: 日志记录器名称，通常使用 __name__

    Returns:
        日志记录器，级别和处理器继承自包日志记录器
    """
    return logging.getLogger(name)


def configure_logging(
    log_dir: Optional[Path] = LOG_DIR,
    level: Optional[int | str] = None,
    console: bool = True,
) -> None:
    """为包日志记录器安装控制台和文件处理器.

    重复调用会先移除上一次安装的处理器。日志目录无法创建时只输出到控制台。

    Args:
        log_dir: 日志目录，None 表示不写文件
        level: 日志级别，None 表示保持当前级别
        console: 是否输出到 stderr
    """
    reset_logging()
    if level is not None:
        set_log_level(level)

    package = logging.getLogger(PACKAGE_LOGGER)
    package.setLevel(_log_level)
    package.propagate = False

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setLevel(_log_level)
        stream.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT))
        _install(package, stream, follow_level=True)

    if log_dir is None:
        return

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        package.warning(f"无法创建日志目录 {log_dir}，仅输出到控制台: {e}")
        return

    _install(package, _file_handler(log_dir / "app.log", _log_level), follow_level=True)
    _install(package, _file_handler(log_dir / "error.log", logging.ERROR))


def _install(
    package: logging.Logger,
    handler: logging.Handler,
    follow_level: bool = False,
) -> None:
    package.addHandler(handler)
    _installed_handlers.append(handler)
    if follow_level:
        _level_handlers.append(handler)


def reset_logging() -> None:
    """移除 configure_logging 安装的处理器."""
    package = logging.getLogger(PACKAGE_LOGGER)
    while _installed_handlers:
        handler = _installed_handlers.pop()
        package.removeHandler(handler)
        handler.close()
    _level_handlers.clear()
    package.propagate = True


def set_log_level(level: int | str) -> None:
    """设置全局日志级别，错误日志处理器保持 ERROR."""
    global _log_level
    _log_level = _parse_level(level)

    logging.getLogger(PACKAGE_LOGGER).setLevel(_log_level)
    for handler in _level_handlers:
        handler.setLevel(_log_level)


def get_log_level_name() -> str:
    """获取当前日志级别名称."""
    return logging.getLevelName(_log_level)
