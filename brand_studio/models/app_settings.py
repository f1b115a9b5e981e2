"""应用设置模型."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from brand_studio.utils.constants import (
    API_MAX_RETRIES,
    API_RETRY_DELAY,
    API_TIMEOUT,
    DEFAULT_API_BASE,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_EXPORT_QUALITY,
    DEFAULT_IMAGE_MODEL,
    THUMBNAIL_QUALITY,
    THUMBNAIL_SIZE,
)
from brand_studio.utils.helpers import parse_color


class Settings(BaseSettings):
    """应用设置.

    支持从环境变量（前缀 ``BRAND_STUDIO_``）和 .env 文件加载配置。

    Attributes:
        log_level: 日志级别
        log_to_file: 是否写入日志文件
        provider: 图片生成服务商
        api_key: API 密钥
        api_base: API 基础 URL
        image_model: 图片生成模型
        timeout: 请求超时（秒）
        max_retries: 连接错误重试次数
        retry_delay: 初始重试延迟（秒）
        canvas_width: 新文档默认宽度
        canvas_height: 新文档默认高度
        background_color: 画布背景色
        export_quality: 默认导出质量 (0-1)
        thumbnail_quality: 版本缩略图质量 (0-1)
        thumbnail_max_size: 版本缩略图最大边长
    """

    model_config = SettingsConfigDict(
        env_prefix="BRAND_STUDIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="日志级别")
    log_to_file: bool = Field(default=True, description="是否写入日志文件")

    # 生成服务
    provider: str = Field(default="openai", description="图片生成服务商")
    api_key: Optional[SecretStr] = Field(default=None, description="API 密钥")
    api_base: str = Field(default=DEFAULT_API_BASE, description="API 基础 URL")
    image_model: str = Field(default=DEFAULT_IMAGE_MODEL, description="图片生成模型")
    timeout: float = Field(default=API_TIMEOUT, ge=1, le=600, description="请求超时 (秒)")
    max_retries: int = Field(default=API_MAX_RETRIES, ge=0, le=10, description="最大重试次数")
    retry_delay: float = Field(default=API_RETRY_DELAY, ge=0, le=30, description="重试延迟 (秒)")

    # 画布
    canvas_width: int = Field(default=DEFAULT_CANVAS_WIDTH, ge=1, le=8192)
    canvas_height: int = Field(default=DEFAULT_CANVAS_HEIGHT, ge=1, le=8192)
    background_color: str = Field(default=DEFAULT_BACKGROUND_COLOR)

    # 导出与版本
    export_quality: float = Field(default=DEFAULT_EXPORT_QUALITY, ge=0, le=1)
    thumbnail_quality: float = Field(default=THUMBNAIL_QUALITY, ge=0, le=1)
    thumbnail_max_size: int = Field(default=THUMBNAIL_SIZE[0], ge=16, le=4096)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"无效的日志级别: {v}，有效值: {valid_levels}")
        return upper_v

    @field_validator("api_base")
    @classmethod
    def validate_api_base(cls, v: str) -> str:
        """验证 API URL."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("API URL 必须以 http:// 或 https:// 开头")
        return v

    @field_validator("background_color")
    @classmethod
    def validate_background_color(cls, v: str) -> str:
        """验证背景色."""
        parse_color(v)
        return v

    @property
    def has_api_key(self) -> bool:
        """是否配置了 API 密钥."""
        return self.api_key is not None and len(self.api_key.get_secret_value()) > 0

    def get_api_key_value(self) -> Optional[str]:
        """获取 API 密钥明文值，不要写入日志."""
        if self.api_key:
            return self.api_key.get_secret_value()
        return None
