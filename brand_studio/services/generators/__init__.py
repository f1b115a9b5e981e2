"""图片生成服务模块."""

from brand_studio.services.generators.base import BaseImageGenerator, GeneratorType
from brand_studio.services.generators.callable_generator import CallableImageGenerator
from brand_studio.services.generators.factory import (
    create_generator_from_settings,
    create_image_generator,
    get_available_generators,
    register_generator,
)
from brand_studio.services.generators.openai_provider import OpenAIImageGenerator

__all__ = [
    "BaseImageGenerator",
    "CallableImageGenerator",
    "GeneratorType",
    "OpenAIImageGenerator",
    "create_generator_from_settings",
    "create_image_generator",
    "get_available_generators",
    "register_generator",
]
