"""函数式图片生成服务.

把任意 ``async (prompt, options) -> list[bytes]`` 函数包装成生成服务，
用于嵌入宿主环境已有的生成能力。
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

from brand_studio.models.canvas import AspectRatio
from brand_studio.services.generators.base import BaseImageGenerator, GeneratorType
from brand_studio.utils.exceptions import EmptyGenerationError

GenerateFunc = Callable[[str, dict[str, Any]], Awaitable[list[bytes]]]


class CallableImageGenerator(BaseImageGenerator):
    """包装异步函数的生成服务.

    Example:
        >>> async def fake(prompt, options):
        ...     return [png_bytes]
        >>> generator = CallableImageGenerator(fake)
    """

    provider_type = GeneratorType.CALLABLE

    def __init__(self, func: GenerateFunc, model: Optional[str] = None) -> None:
        super().__init__(api_key=None, model=model)
        self._func = func

    @property
    def default_model(self) -> str:
        return "callable"

    async def generate_images(
        self,
        prompt: str,
        aspect_ratio: AspectRatio = AspectRatio.SQUARE,
        number_of_images: int = 1,
    ) -> list[bytes]:
        options = {
            "aspect_ratio": AspectRatio(aspect_ratio).value,
            "number_of_images": number_of_images,
        }
        images = [data for data in await self._func(prompt, options) if data]
        if not images:
            raise EmptyGenerationError(prompt)
        return images
