"""OpenAI 图片生成服务.

使用 OpenAI Images API 根据提示词生成图片。
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional

import httpx
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError as OpenAITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)

from brand_studio.models.canvas import AspectRatio
from brand_studio.services.generators.base import BaseImageGenerator, GeneratorType
from brand_studio.utils.constants import (
    API_MAX_RETRIES,
    API_RETRY_DELAY,
    API_TIMEOUT,
    DEFAULT_API_BASE,
    DEFAULT_IMAGE_MODEL,
)
from brand_studio.utils.exceptions import (
    APIKeyNotFoundError,
    APIRequestError,
    APITimeoutError,
    EmptyGenerationError,
    GenerationError,
)
from brand_studio.utils.logger import setup_logger
from brand_studio.utils.retry import async_retry

logger = setup_logger(__name__)

# 宽高比到 API 支持尺寸的映射
ASPECT_RATIO_SIZES: dict[AspectRatio, str] = {
    AspectRatio.SQUARE: "1024x1024",
    AspectRatio.LANDSCAPE: "1536x1024",
    AspectRatio.LANDSCAPE_4_3: "1536x1024",
    AspectRatio.PORTRAIT: "1024x1536",
    AspectRatio.PORTRAIT_3_4: "1024x1536",
}


class OpenAIImageGenerator(BaseImageGenerator):
    """OpenAI 图片生成服务.

    使用 GPT-Image / DALL-E 系列模型。响应中只有 URL 时通过 httpx 下载图片。
    连接错误和限流错误按指数退避重试，其他错误直接失败。
    """

    provider_type = GeneratorType.OPENAI

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = API_TIMEOUT,
        max_retries: int = API_MAX_RETRIES,
        retry_delay: float = API_RETRY_DELAY,
        **kwargs,
    ) -> None:
        """初始化 OpenAI 生成服务.

        Args:
            api_key: OpenAI API 密钥
            model: 模型名称
            base_url: API 基础 URL
            timeout: 请求超时时间 (秒)
            max_retries: 连接/限流错误的重试次数
            retry_delay: 初始重试延迟 (秒)
        """
        super().__init__(api_key, model, **kwargs)
        self._base_url = base_url or DEFAULT_API_BASE
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._client: Optional[AsyncOpenAI] = None

    @property
    def default_model(self) -> str:
        return DEFAULT_IMAGE_MODEL

    @property
    def client(self) -> AsyncOpenAI:
        """获取 OpenAI 异步客户端.

        Raises:
            APIKeyNotFoundError: 未配置 API 密钥
        """
        if self._client is None:
            if not self._api_key:
                raise APIKeyNotFoundError()
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,  # 使用自己的重试机制
            )
        return self._client

    async def generate_images(
        self,
        prompt: str,
        aspect_ratio: AspectRatio = AspectRatio.SQUARE,
        number_of_images: int = 1,
    ) -> list[bytes]:
        """根据提示词生成图片.

        Raises:
            APIKeyNotFoundError: 未配置 API 密钥
            APITimeoutError: 请求超时
            APIRequestError: API 返回错误或连接失败
            EmptyGenerationError: 未返回任何图片
        """
        size = ASPECT_RATIO_SIZES[AspectRatio(aspect_ratio)]
        logger.info(f"开始 AI 图片生成: size={size}, n={number_of_images}, prompt={prompt[:50]}")

        request = async_retry(
            max_retries=self._max_retries,
            delay=self._retry_delay,
            exceptions=(APIConnectionError, RateLimitError),
        )(self._request)

        try:
            response = await request(prompt, size, number_of_images)
            images = await self._extract_images(response)

        except GenerationError:
            raise

        except APIStatusError as e:
            logger.error(f"AI API 错误: status={e.status_code}, message={e.message}")
            raise APIRequestError(e.message, e.status_code) from e

        except APIConnectionError as e:
            logger.error(f"AI 连接错误: {e}")
            raise APIRequestError(f"无法连接到 AI 服务: {e}") from e

        except httpx.HTTPError as e:
            logger.error(f"下载生成图片失败: {e}")
            raise APIRequestError(f"下载生成图片失败: {e}") from e

        except Exception as e:
            logger.exception("AI 生成未知错误")
            raise GenerationError(f"AI 生成失败: {e}") from e

        if not images:
            raise EmptyGenerationError(prompt)

        logger.info(f"AI 图片生成完成: {len(images)} 张")
        return images

    async def _request(self, prompt: str, size: str, n: int):
        try:
            return await self.client.images.generate(
                model=self._model,
                prompt=prompt,
                n=n,
                size=size,
            )
        # 超时是连接错误的子类，在重试之外转换，超时不重试
        except OpenAITimeoutError as e:
            logger.error("AI 请求超时")
            raise APITimeoutError(self._timeout) from e

    async def _extract_images(self, response) -> list[bytes]:
        """从响应中提取图片字节（base64 或 URL）."""
        images: list[bytes] = []
        for item in response.data or []:
            if getattr(item, "b64_json", None):
                try:
                    images.append(base64.b64decode(item.b64_json))
                except (binascii.Error, ValueError) as e:
                    logger.warning(f"忽略无效的 base64 图片数据: {e}")
            elif getattr(item, "url", None):
                images.append(await self._download(item.url))
        return images

    async def _download(self, url: str) -> bytes:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.content

    async def health_check(self) -> bool:
        """检查服务是否可用."""
        try:
            await self.client.models.list()
            logger.info("OpenAI 服务健康检查通过")
            return True
        except Exception as e:
            logger.warning(f"OpenAI 服务健康检查失败: {e}")
            return False

    async def close(self) -> None:
        """关闭客户端连接."""
        if self._client:
            await self._client.close()
            self._client = None
            logger.debug("OpenAI 客户端已关闭")
