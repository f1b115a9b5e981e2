"""自定义异常类."""

from __future__ import annotations


class AppException(Exception):
    """引擎基础异常类.

    所有自定义异常都应继承此类。

    Attributes:
        message: 错误消息
        code: 错误代码
    """

    def __init__(self, message: str, code: str = "UNKNOWN") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        """返回异常字符串表示."""
        return f"[{self.code}] {self.message}"


# ===================
# 配置相关异常
# ===================
class ConfigError(AppException):
    """配置错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIG_ERROR")


# ===================
# AI 生成相关异常
# ===================
class GenerationError(AppException):
    """AI 图片生成错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "AI_SERVICE_ERROR")


class APIKeyNotFoundError(GenerationError):
    """API 密钥未找到异常."""

    def __init__(self) -> None:
        super().__init__("API 密钥未配置，请设置 BRAND_STUDIO_API_KEY")


class APIRequestError(GenerationError):
    """API 请求错误异常."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        msg = message
        if status_code:
            msg = f"API 请求失败 (HTTP {status_code}): {message}"
        super().__init__(msg)


class APITimeoutError(GenerationError):
    """API 超时异常."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"API 请求超时 ({timeout}秒)")


class EmptyGenerationError(GenerationError):
    """AI 未返回任何图片."""

    def __init__(self, prompt: str) -> None:
        super().__init__(f"AI 未生成任何图片: {prompt[:40]}")


# ===================
# 图片相关异常
# ===================
class ImageDecodeError(AppException):
    """图片解码失败异常."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"图片数据无法解码: {reason}", "IMAGE_DECODE_ERROR")


class ExportError(AppException):
    """导出失败异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "EXPORT_ERROR")


# ===================
# 图层相关异常
# ===================
class LayerError(AppException):
    """图层错误异常."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "LAYER_ERROR")


class LayerKindMismatchError(LayerError):
    """图层类型与内容类型不一致."""

    def __init__(self, kind: str, payload_type: str) -> None:
        super().__init__(f"图层类型 '{kind}' 与内容类型 '{payload_type}' 不一致")
