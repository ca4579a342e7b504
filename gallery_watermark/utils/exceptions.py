"""自定义异常类."""

from __future__ import annotations


class AppException(Exception):
    """应用基础异常类.

    所有自定义异常都应继承此类。

    Attributes:
        message: 错误消息
        code: 错误代码
    """

    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        """初始化异常.

        Args:
            message: 错误消息
            code: 错误代码
        """
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        """返回异常字符串表示."""
        return f"[{self.code}] {self.message}"


# ===================
# 配置相关异常
# ===================
class ConfigurationError(AppException):
    """配置错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIG_ERROR")


class InvalidConfigValueError(ConfigurationError):
    """配置值无效异常."""

    def __init__(self, key: str, value: object, reason: str = "") -> None:
        self.key = key
        self.value = value
        msg = f"配置项 '{key}' 的值 '{value}' 无效"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


# ===================
# 图片处理相关异常
# ===================
class ImageProcessError(AppException):
    """图片处理错误异常."""

    def __init__(self, message: str, code: str = "IMAGE_PROCESS_ERROR") -> None:
        super().__init__(message, code)


class DecodeError(ImageProcessError):
    """图片解码失败异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "DECODE_ERROR")


class EmptyImageError(DecodeError):
    """图片数据为空异常."""

    def __init__(self) -> None:
        super().__init__("图片数据为空")


class UnsupportedImageFormatError(DecodeError):
    """不支持的图片格式异常."""

    def __init__(self, format: str) -> None:
        self.format = format
        super().__init__(f"不支持的图片格式: {format}")


class EncodeError(ImageProcessError):
    """水印合成或重新编码失败异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "ENCODE_ERROR")


class ImageTooLargeError(ImageProcessError):
    """图片文件过大异常."""

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        size_mb = size / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        super().__init__(f"图片文件过大 ({size_mb:.1f}MB)，最大允许 {max_mb:.1f}MB")


# ===================
# 远程服务相关异常
# ===================
class RemoteServiceError(AppException):
    """远程服务错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "REMOTE_SERVICE_ERROR")


class APIRequestError(RemoteServiceError):
    """API 请求错误异常."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        msg = message
        if status_code:
            msg = f"API 请求失败 (HTTP {status_code}): {message}"
        super().__init__(msg)


class APITimeoutError(RemoteServiceError):
    """API 超时异常."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"API 请求超时 ({timeout}秒)")


class ServiceUnavailableError(APIRequestError):
    """远程服务暂时不可用异常（连接失败或 5xx），可重试."""


class ImageHostError(RemoteServiceError):
    """图床上传失败异常."""


class ImageFetchError(RemoteServiceError):
    """远程图片下载失败异常."""


class InvalidImageURLError(RemoteServiceError):
    """图片地址无效异常."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"无效的图片地址: {url}")
