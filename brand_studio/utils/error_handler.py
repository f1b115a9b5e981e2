"""错误处理工具模块.

将异常映射为用户友好的错误消息。
"""

from __future__ import annotations

from typing import Any

from brand_studio.utils.exceptions import (
    APIKeyNotFoundError,
    APITimeoutError,
    AppException,
    ConfigError,
    ExportError,
    GenerationError,
    ImageDecodeError,
    LayerError,
)

# 错误消息映射（子类在前）
ERROR_MESSAGES = {
    APIKeyNotFoundError: "请先配置 API 密钥",
    APITimeoutError: "网络请求超时，请检查网络连接后重试",
    GenerationError: "图片生成失败，请稍后重试",
    ImageDecodeError: "图片无法识别，请检查文件格式",
    ExportError: "导出失败",
    LayerError: "图层操作失败",
    ConfigError: "配置错误，请检查配置文件",
}

# 生成桥接对外统一返回的失败消息
GENERIC_GENERATION_FAILURE = "生成失败，请稍后重试"


def get_user_friendly_message(exception: BaseException) -> str:
    """获取用户友好的错误消息.

    Args:
        exception: 异常对象

    Returns:
        用户友好的错误消息
    """
    for exc_type, message in ERROR_MESSAGES.items():
        if isinstance(exception, exc_type):
            return message

    if isinstance(exception, AppException):
        return exception.message

    return "操作失败，请稍后重试"


def get_error_details(exception: BaseException) -> dict[str, Any]:
    """获取错误详细信息.

    Args:
        exception: 异常对象

    Returns:
        包含错误详情的字典
    """
    details: dict[str, Any] = {
        "type": type(exception).__name__,
        "message": str(exception),
        "user_message": get_user_friendly_message(exception),
    }
    if isinstance(exception, AppException):
        details["code"] = exception.code
    return details
