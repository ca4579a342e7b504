"""错误处理工具模块.

提供统一的错误处理机制和用户友好的错误消息。
"""

from __future__ import annotations

from typing import Any

from gallery_watermark.utils.exceptions import (
    APIRequestError,
    APITimeoutError,
    AppException,
    ConfigurationError,
    DecodeError,
    EmptyImageError,
    EncodeError,
    ImageProcessError,
    ImageTooLargeError,
    InvalidImageURLError,
    RemoteServiceError,
    UnsupportedImageFormatError,
)
from gallery_watermark.utils.logger import setup_logger

logger = setup_logger(__name__)


# 错误消息映射（子类在前）
ERROR_MESSAGES = {
    EmptyImageError: "图片数据为空",
    UnsupportedImageFormatError: "仅支持 JPEG、PNG、WEBP 格式的图片",
    DecodeError: "无法读取图片，请确认文件未损坏",
    EncodeError: "水印生成失败，请稍后重试",
    ImageTooLargeError: "图片文件过大",
    ImageProcessError: "图片处理失败，请检查图片文件",
    InvalidImageURLError: "图片地址无效",
    APITimeoutError: "网络请求超时，请检查网络连接后重试",
    APIRequestError: "远程服务请求失败，请稍后重试",
    RemoteServiceError: "远程服务异常，请稍后重试",
    ConfigurationError: "配置错误，请检查配置",
}


def get_user_friendly_message(exception: Exception) -> str:
    """获取用户友好的错误消息.

    Args:
        exception: 异常对象

    Returns:
        用户友好的错误消息
    """
    # 检查是否是已知的应用异常
    for exc_type, message in ERROR_MESSAGES.items():
        if isinstance(exception, exc_type):
            return message

    # 如果是 AppException，使用其消息
    if isinstance(exception, AppException):
        return exception.message

    # 未知异常
    return "操作失败，请稍后重试"


def get_error_details(exception: Exception) -> dict[str, Any]:
    """获取错误详细信息.

    Args:
        exception: 异常对象

    Returns:
        包含错误详情的字典
    """
    details = {
        "type": type(exception).__name__,
        "message": str(exception),
        "user_message": get_user_friendly_message(exception),
    }

    # 添加应用异常的额外信息
    if isinstance(exception, AppException):
        details["code"] = exception.code

    # 添加 API 请求错误的状态码
    if isinstance(exception, APIRequestError) and exception.status_code:
        details["status_code"] = exception.status_code

    return details


class ErrorCollector:
    """错误收集器.

    用于批量操作时收集所有错误。

    Example:
        >>> collector = ErrorCollector()
        >>> for item in items:
        ...     try:
        ...         process(item)
        ...     except Exception as e:
        ...         collector.add(e, context=f"处理 {item}")
        >>> if collector.has_errors:
        ...     print(collector.summary)
    """

    def __init__(self) -> None:
        self._errors: list[tuple[Exception, str]] = []

    def add(self, exception: Exception, context: str = "") -> None:
        """添加错误.

        Args:
            exception: 异常对象
            context: 上下文描述
        """
        self._errors.append((exception, context))
        logger.warning(f"收集到错误 [{context}]: {exception}")

    @property
    def has_errors(self) -> bool:
        """是否有错误."""
        return len(self._errors) > 0

    @property
    def error_count(self) -> int:
        """错误数量."""
        return len(self._errors)

    @property
    def errors(self) -> list[tuple[Exception, str]]:
        """所有错误."""
        return self._errors.copy()

    @property
    def summary(self) -> str:
        """错误摘要."""
        if not self._errors:
            return "无错误"

        lines = [f"共 {len(self._errors)} 个错误:"]
        for i, (exc, ctx) in enumerate(self._errors, 1):
            ctx_str = f" ({ctx})" if ctx else ""
            lines.append(f"  {i}. {type(exc).__name__}{ctx_str}: {exc}")

        return "\n".join(lines)
