"""AI 生成桥接.

把提示词交给图片生成服务，并把结果合并回文档：新建铺满画布的图片图层、
替换已有图片图层的内容，或生成去背景副本。

Features:
    - asyncio 任务，提交后立即返回
    - 按目标图层分配请求令牌，新请求取消旧请求，过期结果被丢弃
    - 失败时文档不变，只返回统一的失败消息
    - 提示词历史
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from brand_studio.core.layer_factory import create_generated_layer
from brand_studio.models.canvas import AspectRatio
from brand_studio.models.layer import ImagePayload, LayerKind
from brand_studio.services.generators.base import BaseImageGenerator
from brand_studio.utils.constants import (
    FALLBACK_BASE_PROMPT,
    PROMPT_HISTORY_LIMIT,
    REMOVE_BACKGROUND_PROMPT,
)
from brand_studio.utils.error_handler import GENERIC_GENERATION_FAILURE, get_error_details
from brand_studio.utils.helpers import generate_short_id
from brand_studio.utils.image_utils import encode_data_url, probe_image
from brand_studio.utils.logger import setup_logger

if TYPE_CHECKING:
    from brand_studio.core.document import DocumentSession

logger = setup_logger(__name__)

# 快速迭代预设 (label, modifier)
AI_ITERATION_PRESETS: list[tuple[str, str]] = [
    ("More Professional", "make it more professional and corporate"),
    ("More Vibrant", "make the colors more vibrant and energetic"),
    ("More Minimalist", "simplify to a more minimalist design"),
    ("More Bold", "make it bolder with stronger contrast"),
    ("Warmer Tones", "shift to warmer color tones"),
    ("Cooler Tones", "shift to cooler color tones"),
    ("More Playful", "make it more playful and fun"),
    ("More Elegant", "make it more elegant and sophisticated"),
]

NO_BACKGROUND_SUFFIX = " (no bg)"


class GenerationOperation(str, Enum):
    """生成操作类型."""

    GENERATE = "generate"
    ITERATE = "iterate"
    REMOVE_BACKGROUND = "remove_background"


@dataclass
class GenerationResult:
    """生成结果.

    Attributes:
        token: 请求令牌
        operation: 操作类型
        prompt: 实际使用的提示词
        success: 是否成功并已应用到文档
        layer_id: 新建或被修改的图层ID
        message: 失败时的统一提示消息
        stale: 结果是否因被新请求取代而丢弃
    """

    token: str
    operation: GenerationOperation
    prompt: str
    success: bool = False
    layer_id: Optional[str] = None
    message: Optional[str] = None
    stale: bool = False


CompletionCallback = Callable[[GenerationResult], None]


@dataclass
class _Request:
    token: str
    target: str
    operation: GenerationOperation
    prompt: str
    aspect_ratio: AspectRatio
    source_id: Optional[str] = None
    history_entry: Optional[str] = None


class GenerationBridge:
    """AI 生成桥接.

    结果在事件循环线程上应用，因此与同步的图层修改不会交错。

    Example:
        >>> bridge = GenerationBridge(doc, generator)
        >>> result = await bridge.generate("a red apple")
        >>> result.success
        True
    """

    def __init__(
        self,
        document: "DocumentSession",
        generator: BaseImageGenerator,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        """初始化生成桥接.

        Args:
            document: 目标文档
            generator: 图片生成服务
            on_complete: 完成回调，每个未被取消的请求调用一次
        """
        self._document = document
        self._generator = generator
        self._on_complete = on_complete
        self._latest: dict[str, str] = {}  # target -> token
        self._tasks: dict[str, asyncio.Task[GenerationResult]] = {}
        self._prompt_history: list[str] = []

    @property
    def prompt_history(self) -> list[str]:
        """提示词历史（最新在前）."""
        return list(self._prompt_history)

    @property
    def pending_count(self) -> int:
        """未完成的后台任务数."""
        return sum(1 for task in self._tasks.values() if not task.done())

    @property
    def is_generating(self) -> bool:
        return self.pending_count > 0

    # ===================
    # 请求构造
    # ===================

    def _aspect_ratio(self, aspect_ratio: AspectRatio | str | None) -> AspectRatio:
        if aspect_ratio is None:
            return self._document.canvas.aspect_ratio_hint
        return AspectRatio(aspect_ratio)

    def _image_layer_id(self, layer_id: Optional[str]) -> Optional[str]:
        layer = self._document.store.get(layer_id or self._document.store.selected_id)
        if layer is None or layer.kind != LayerKind.IMAGE:
            return None
        return layer.id

    def _generate_request(
        self, prompt: str, aspect_ratio: AspectRatio | str | None
    ) -> _Request:
        token = generate_short_id()
        return _Request(
            token=token,
            target=f"new:{token}",
            operation=GenerationOperation.GENERATE,
            prompt=prompt.strip(),
            aspect_ratio=self._aspect_ratio(aspect_ratio),
            history_entry=prompt.strip(),
        )

    def _iterate_request(
        self,
        modifier: str,
        layer_id: Optional[str],
        aspect_ratio: AspectRatio | str | None,
    ) -> _Request:
        base_prompt = self._prompt_history[0] if self._prompt_history else FALLBACK_BASE_PROMPT
        prompt = f"{base_prompt}, {modifier.strip()}"
        source_id = self._image_layer_id(layer_id)
        return _Request(
            token=generate_short_id(),
            target=source_id or "",
            operation=GenerationOperation.ITERATE,
            prompt=prompt,
            aspect_ratio=self._aspect_ratio(aspect_ratio),
            source_id=source_id,
            history_entry=prompt,
        )

    def _remove_background_request(self, layer_id: Optional[str]) -> _Request:
        source_id = self._image_layer_id(layer_id)
        return _Request(
            token=generate_short_id(),
            target=f"no-bg:{source_id}",
            operation=GenerationOperation.REMOVE_BACKGROUND,
            prompt=REMOVE_BACKGROUND_PROMPT,
            aspect_ratio=AspectRatio.SQUARE,
            source_id=source_id,
        )

    # ===================
    # 公开接口
    # ===================

    async def generate(
        self,
        prompt: str,
        aspect_ratio: AspectRatio | str | None = None,
    ) -> GenerationResult:
        """根据提示词生成新图层.

        成功时新图层（铺满画布）插入顶层并被选中。

        Args:
            prompt: 提示词
            aspect_ratio: 宽高比，默认按画布形状推断
        """
        return await self._run(self._generate_request(prompt, aspect_ratio))

    async def iterate(
        self,
        modifier: str,
        layer_id: Optional[str] = None,
        aspect_ratio: AspectRatio | str | None = None,
    ) -> GenerationResult:
        """在最近一次提示词基础上修改图片图层的内容.

        只替换内容，图层几何不变。

        Args:
            modifier: 修改描述，例如 AI_ITERATION_PRESETS 中的 modifier
            layer_id: 目标图层，默认当前选中图层
            aspect_ratio: 宽高比，默认按画布形状推断
        """
        return await self._run(self._iterate_request(modifier, layer_id, aspect_ratio))

    async def remove_background(self, layer_id: Optional[str] = None) -> GenerationResult:
        """为图片图层生成去背景副本.

        Args:
            layer_id: 源图层，默认当前选中图层
        """
        return await self._run(self._remove_background_request(layer_id))

    def submit_generate(
        self,
        prompt: str,
        aspect_ratio: AspectRatio | str | None = None,
    ) -> asyncio.Task[GenerationResult]:
        """后台执行 :meth:`generate`，立即返回任务."""
        return self._submit(self._generate_request(prompt, aspect_ratio))

    def submit_iterate(
        self,
        modifier: str,
        layer_id: Optional[str] = None,
        aspect_ratio: AspectRatio | str | None = None,
    ) -> asyncio.Task[GenerationResult]:
        """后台执行 :meth:`iterate`，立即返回任务."""
        return self._submit(self._iterate_request(modifier, layer_id, aspect_ratio))

    def submit_remove_background(
        self, layer_id: Optional[str] = None
    ) -> asyncio.Task[GenerationResult]:
        """后台执行 :meth:`remove_background`，立即返回任务."""
        return self._submit(self._remove_background_request(layer_id))

    def cancel_all(self) -> int:
        """取消所有未完成的后台任务.

        Returns:
            被取消的任务数
        """
        cancelled = 0
        for task in list(self._tasks.values()):
            if not task.done():
                task.cancel()
                cancelled += 1
        self._tasks.clear()
        self._latest.clear()
        if cancelled:
            logger.info(f"已取消 {cancelled} 个生成任务")
        return cancelled

    # ===================
    # 执行
    # ===================

    def _submit(self, request: _Request) -> asyncio.Task[GenerationResult]:
        previous = self._tasks.get(request.target)
        if previous is not None and not previous.done():
            previous.cancel()
            logger.debug(f"取消旧的生成任务: target={request.target}")

        task = asyncio.create_task(self._run(request))
        self._tasks[request.target] = task

        def _cleanup(done: asyncio.Task[GenerationResult]) -> None:
            if self._tasks.get(request.target) is done:
                del self._tasks[request.target]
            if done.cancelled():
                logger.debug(f"生成任务已取消: token={request.token}")

        task.add_done_callback(_cleanup)
        return task

    async def _run(self, request: _Request) -> GenerationResult:
        result = GenerationResult(
            token=request.token,
            operation=request.operation,
            prompt=request.prompt,
        )

        if not request.prompt:
            logger.warning("提示词为空，跳过生成")
            return self._finish(self._failed(result))

        if request.operation != GenerationOperation.GENERATE and request.source_id is None:
            logger.warning(f"{request.operation.value}: 未选中图片图层")
            return self._finish(self._failed(result))

        self._latest[request.target] = request.token
        logger.info(
            f"开始生成: op={request.operation.value}, token={request.token}, "
            f"aspect_ratio={request.aspect_ratio.value}"
        )

        try:
            images = await self._generator.generate_images(
                request.prompt,
                aspect_ratio=request.aspect_ratio,
                number_of_images=1,
            )

            if self._latest.get(request.target) != request.token:
                logger.info(f"丢弃过期的生成结果: token={request.token}")
                result.stale = True
                return self._finish(self._failed(result))

            result.layer_id = self._apply(request, images[0])
            result.success = True
        except Exception as e:
            logger.error(f"生成失败: op={request.operation.value}, 详情: {get_error_details(e)}")
            self._failed(result)
        finally:
            if self._latest.get(request.target) == request.token:
                del self._latest[request.target]

        if result.success and request.history_entry:
            self._remember(request.history_entry)
            logger.info(f"生成完成: op={request.operation.value}, layer={result.layer_id}")
        return self._finish(result)

    def _apply(self, request: _Request, data: bytes) -> str:
        """把生成的图片应用到文档.

        Raises:
            ImageDecodeError: 图片无法解码
            LookupError: 目标图层已不是图片图层
        """
        store = self._document.store
        canvas = self._document.canvas

        if request.operation == GenerationOperation.GENERATE:
            layer = create_generated_layer(canvas, data, number=len(store) + 1)
            layer_id = store.add(layer)
            store.select(layer_id)
            return layer_id

        source = store.get(request.source_id)
        if source is None or source.kind != LayerKind.IMAGE:
            raise LookupError(f"目标图层已不是图片图层: {request.source_id}")

        width, height, mime_type = probe_image(data)
        payload = ImagePayload(
            src=encode_data_url(data, mime_type),
            original_width=width,
            original_height=height,
        )

        if request.operation == GenerationOperation.ITERATE:
            store.update(source.id, payload=payload)
            return source.id

        copy = source.clone(name_suffix=NO_BACKGROUND_SUFFIX).merged(payload=payload)
        layer_id = store.add(copy)
        store.select(layer_id)
        return layer_id

    def _remember(self, prompt: str) -> None:
        self._prompt_history.insert(0, prompt)
        del self._prompt_history[PROMPT_HISTORY_LIMIT:]

    @staticmethod
    def _failed(result: GenerationResult) -> GenerationResult:
        result.success = False
        result.layer_id = None
        result.message = GENERIC_GENERATION_FAILURE
        return result

    def _finish(self, result: GenerationResult) -> GenerationResult:
        if self._on_complete is not None:
            try:
                self._on_complete(result)
            except Exception as e:
                logger.error(f"生成完成回调异常: {e}")
        return result
