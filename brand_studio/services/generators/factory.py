"""图片生成服务工厂."""

from __future__ import annotations

from typing import Optional

from brand_studio.models.app_settings import Settings
from brand_studio.services.generators.base import BaseImageGenerator, GeneratorType
from brand_studio.services.generators.openai_provider import OpenAIImageGenerator
from brand_studio.utils.exceptions import APIKeyNotFoundError
from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

_GENERATOR_CLASSES: dict[GeneratorType, type[BaseImageGenerator]] = {
    GeneratorType.OPENAI: OpenAIImageGenerator,
}


def get_available_generators() -> list[GeneratorType]:
    """获取可通过工厂创建的服务类型."""
    return list(_GENERATOR_CLASSES.keys())


def create_image_generator(
    provider_type: GeneratorType | str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    **kwargs,
) -> BaseImageGenerator:
    """创建图片生成服务实例.

    Args:
        provider_type: 服务类型
        api_key: API 密钥
        model: 模型名称
        **kwargs: 其他配置参数

    Returns:
        生成服务实例

    Raises:
        ValueError: 服务类型不支持
    """
    if isinstance(provider_type, str):
        try:
            provider_type = GeneratorType(provider_type.lower())
        except ValueError:
            raise ValueError(f"不支持的图片生成服务: {provider_type}")

    generator_class = _GENERATOR_CLASSES.get(provider_type)
    if generator_class is None:
        raise ValueError(f"不支持的图片生成服务: {provider_type.value}")

    logger.info(f"创建图片生成服务: {provider_type.value}")
    return generator_class(api_key=api_key, model=model, **kwargs)


def create_generator_from_settings(settings: Settings) -> BaseImageGenerator:
    """根据应用设置创建生成服务.

    Raises:
        APIKeyNotFoundError: 未配置 API 密钥
    """
    if not settings.has_api_key:
        raise APIKeyNotFoundError()

    return create_image_generator(
        settings.provider,
        api_key=settings.get_api_key_value(),
        model=settings.image_model,
        base_url=settings.api_base,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        retry_delay=settings.retry_delay,
    )


def register_generator(
    provider_type: GeneratorType,
    generator_class: type[BaseImageGenerator],
) -> None:
    """注册自定义生成服务.

    Raises:
        ValueError: 类型已存在
    """
    if provider_type in _GENERATOR_CLASSES:
        raise ValueError(f"生成服务类型已存在: {provider_type.value}")
    _GENERATOR_CLASSES[provider_type] = generator_class
    logger.info(f"注册自定义图片生成服务: {provider_type.value}")
