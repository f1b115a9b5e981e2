"""图片生成服务抽象基类.

定义统一的文本生成图片接口，便于扩展不同服务商。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from brand_studio.models.canvas import AspectRatio
from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class GeneratorType(str, Enum):
    """生成服务类型."""

    OPENAI = "openai"
    CALLABLE = "callable"  # 包装任意异步函数


class BaseImageGenerator(ABC):
    """图片生成服务抽象基类.

    实现者只需返回原始图片字节；失败时抛出
    :class:`~brand_studio.utils.exceptions.GenerationError` 的子类。

    Attributes:
        provider_type: 服务类型标识
    """

    provider_type: GeneratorType

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs,
    ) -> None:
        """初始化生成服务.

        Args:
            api_key: API 密钥
            model: 模型名称，为 None 时使用默认模型
            **kwargs: 其他配置参数
        """
        self._api_key = api_key
        self._model = model or self.default_model
        self._extra_config = kwargs

    @property
    @abstractmethod
    def default_model(self) -> str:
        """默认模型名称."""

    @property
    def model(self) -> str:
        """当前使用的模型."""
        return self._model

    @abstractmethod
    async def generate_images(
        self,
        prompt: str,
        aspect_ratio: AspectRatio = AspectRatio.SQUARE,
        number_of_images: int = 1,
    ) -> list[bytes]:
        """根据提示词生成图片.

        Args:
            prompt: 提示词
            aspect_ratio: 宽高比
            number_of_images: 生成数量

        Returns:
            图片字节数据列表（至少一张）
        """

    async def health_check(self) -> bool:
        """检查服务是否可用."""
        return True

    async def close(self) -> None:
        """关闭连接，释放资源."""

    async def __aenter__(self) -> "BaseImageGenerator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
