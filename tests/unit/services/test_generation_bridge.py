"""AI 生成桥接单元测试."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from brand_studio.core.document import DocumentSession
from brand_studio.models.canvas import AspectRatio, Canvas
from brand_studio.models.layer import ImagePayload, Layer
from brand_studio.services.generation_bridge import (
    AI_ITERATION_PRESETS,
    GenerationBridge,
    GenerationOperation,
    GenerationResult,
)
from brand_studio.services.generators import BaseImageGenerator, CallableImageGenerator
from brand_studio.utils.constants import REMOVE_BACKGROUND_PROMPT
from brand_studio.utils.error_handler import GENERIC_GENERATION_FAILURE
from brand_studio.utils.exceptions import APIRequestError
from brand_studio.utils.image_utils import encode_data_url


class FakeGenerator(BaseImageGenerator):
    """记录调用的假生成服务.

    ``gate`` 不为 None 时，生成会等待该事件。
    """

    def __init__(
        self,
        images: Optional[list[bytes]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        super().__init__()
        self.images = images or []
        self.error = error
        self.calls: list[tuple[str, AspectRatio]] = []
        self.gate: Optional[asyncio.Event] = None

    @property
    def default_model(self) -> str:
        return "fake"

    async def generate_images(
        self,
        prompt: str,
        aspect_ratio: AspectRatio = AspectRatio.SQUARE,
        number_of_images: int = 1,
    ) -> list[bytes]:
        self.calls.append((prompt, aspect_ratio))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.images)


# ===================
# Fixtures
# ===================
@pytest.fixture
def generated_png(make_png) -> bytes:
    return make_png(size=(1024, 1024), color=(0, 200, 0, 255))


@pytest.fixture
def generator(generated_png: bytes) -> FakeGenerator:
    return FakeGenerator(images=[generated_png])


@pytest.fixture
def results() -> list[GenerationResult]:
    return []


@pytest.fixture
def bridge(
    document: DocumentSession,
    generator: FakeGenerator,
    results: list[GenerationResult],
) -> GenerationBridge:
    return GenerationBridge(document, generator, on_complete=results.append)


@pytest.fixture
def image_layer_id(document: DocumentSession, make_png) -> str:
    """已选中的图片图层."""
    layer = Layer(
        name="Photo",
        x=100,
        y=120,
        width=300,
        height=200,
        rotation=15,
        payload=ImagePayload(
            src=encode_data_url(make_png(size=(30, 20))),
            original_width=30,
            original_height=20,
        ),
    )
    layer_id = document.store.add(layer)
    document.select(layer_id)
    return layer_id


# ===================
# 新建生成
# ===================
class TestGenerate:
    """测试生成新图层."""

    @pytest.mark.asyncio
    async def test_success_adds_full_bleed_layer(
        self, bridge: GenerationBridge, document: DocumentSession, results
    ) -> None:
        result = await bridge.generate("a red apple", "1:1")

        assert result.success
        assert result.operation == GenerationOperation.GENERATE
        assert len(document.store) == 1
        layer = document.store.layers[0]
        assert result.layer_id == layer.id
        assert document.selected_id == layer.id
        assert layer.generated
        assert layer.name == "AI Generated 1"
        assert (layer.x, layer.y, layer.width, layer.height) == (0, 0, 1080, 1080)
        assert layer.image.original_width == 1024
        assert results == [result]

    @pytest.mark.asyncio
    async def test_failure_leaves_document_unchanged(
        self, document: DocumentSession, make_shape, results
    ) -> None:
        existing = document.store.add(make_shape(0, 0, 10, 10))
        document.select(existing)
        bridge = GenerationBridge(
            document,
            FakeGenerator(error=APIRequestError("quota exceeded", 429)),
            on_complete=results.append,
        )

        result = await bridge.generate("a red apple", "1:1")

        assert not result.success
        assert result.message == GENERIC_GENERATION_FAILURE
        assert "quota" not in result.message
        assert document.store.ids == [existing]
        assert document.selected_id == existing
        assert bridge.prompt_history == []
        assert results == [result]

    @pytest.mark.asyncio
    async def test_empty_result_fails(self, document: DocumentSession) -> None:
        async def nothing(prompt: str, options: dict[str, Any]) -> list[bytes]:
            return []

        bridge = GenerationBridge(document, CallableImageGenerator(nothing))
        result = await bridge.generate("a red apple")
        assert not result.success
        assert len(document.store) == 0

    @pytest.mark.asyncio
    async def test_undecodable_result_fails(self, document: DocumentSession) -> None:
        bridge = GenerationBridge(document, FakeGenerator(images=[b"not an image"]))
        result = await bridge.generate("a red apple")
        assert not result.success
        assert result.message == GENERIC_GENERATION_FAILURE
        assert len(document.store) == 0

    @pytest.mark.asyncio
    async def test_blank_prompt_skipped(self, bridge: GenerationBridge, generator) -> None:
        result = await bridge.generate("   ")
        assert not result.success
        assert generator.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "size,expected",
        [
            ((1080, 1080), AspectRatio.SQUARE),
            ((1200, 630), AspectRatio.LANDSCAPE),
            ((1080, 1920), AspectRatio.PORTRAIT),
        ],
    )
    async def test_aspect_ratio_from_canvas(
        self, generator: FakeGenerator, size, expected: AspectRatio
    ) -> None:
        document = DocumentSession(canvas=Canvas(width=size[0], height=size[1]))
        bridge = GenerationBridge(document, generator)
        await bridge.generate("a poster")
        assert generator.calls == [("a poster", expected)]

    @pytest.mark.asyncio
    async def test_callable_generator_options(self, document: DocumentSession, generated_png) -> None:
        seen: list[dict[str, Any]] = []

        async def generate_image(prompt: str, options: dict[str, Any]) -> list[bytes]:
            seen.append(options)
            return [generated_png]

        bridge = GenerationBridge(document, CallableImageGenerator(generate_image))
        result = await bridge.generate("a red apple", "9:16")
        assert result.success
        assert seen == [{"aspect_ratio": "9:16", "number_of_images": 1}]

    @pytest.mark.asyncio
    async def test_prompt_history_limit(self, bridge: GenerationBridge) -> None:
        for i in range(25):
            await bridge.generate(f"prompt {i}")
        history = bridge.prompt_history
        assert len(history) == 20
        assert history[0] == "prompt 24"
        assert history[-1] == "prompt 5"


# ===================
# 迭代
# ===================
class TestIterate:
    """测试迭代已有图片图层."""

    @pytest.mark.asyncio
    async def test_iterate_replaces_image_keeps_geometry(
        self,
        bridge: GenerationBridge,
        document: DocumentSession,
        generator: FakeGenerator,
        image_layer_id: str,
    ) -> None:
        before = document.store.get(image_layer_id)
        modifier = AI_ITERATION_PRESETS[1][1]

        result = await bridge.iterate(modifier)

        after = document.store.get(image_layer_id)
        assert result.success
        assert result.layer_id == image_layer_id
        assert generator.calls[0][0] == f"an image, {modifier}"
        assert after.image.src != before.image.src
        assert after.image.original_width == 1024
        assert after.image.original_height == 1024
        assert (after.x, after.y, after.width, after.height, after.rotation) == (
            before.x,
            before.y,
            before.width,
            before.height,
            before.rotation,
        )
        assert after.name == before.name
        assert len(document.store) == 1

    @pytest.mark.asyncio
    async def test_iterate_builds_on_last_prompt(
        self, bridge: GenerationBridge, generator: FakeGenerator
    ) -> None:
        await bridge.generate("a cat")
        await bridge.iterate("make it warmer")
        assert generator.calls[-1][0] == "a cat, make it warmer"
        assert bridge.prompt_history[0] == "a cat, make it warmer"

    @pytest.mark.asyncio
    async def test_iterate_requires_image_layer(
        self, bridge: GenerationBridge, document: DocumentSession, generator, make_shape
    ) -> None:
        document.select(document.store.add(make_shape(0, 0, 10, 10)))
        result = await bridge.iterate("make it bold")
        assert not result.success
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_target_deleted_while_pending(
        self,
        bridge: GenerationBridge,
        document: DocumentSession,
        generator: FakeGenerator,
        image_layer_id: str,
    ) -> None:
        """测试生成期间目标图层被删除时不做任何修改."""
        generator.gate = asyncio.Event()
        task = asyncio.create_task(bridge.iterate("make it bold"))
        await asyncio.sleep(0)

        document.delete_layer(image_layer_id)
        generator.gate.set()
        result = await task

        assert not result.success
        assert len(document.store) == 0


# ===================
# 去背景
# ===================
class TestRemoveBackground:
    """测试去背景."""

    @pytest.mark.asyncio
    async def test_creates_copy_above_source(
        self,
        bridge: GenerationBridge,
        document: DocumentSession,
        generator: FakeGenerator,
        image_layer_id: str,
    ) -> None:
        source = document.store.get(image_layer_id)
        result = await bridge.remove_background()

        assert result.success
        assert generator.calls == [(REMOVE_BACKGROUND_PROMPT, AspectRatio.SQUARE)]
        assert document.store.ids == [result.layer_id, image_layer_id]
        assert document.selected_id == result.layer_id

        copy = document.store.get(result.layer_id)
        assert copy.name == "Photo (no bg)"
        assert (copy.x, copy.y, copy.width, copy.height, copy.rotation) == (
            source.x,
            source.y,
            source.width,
            source.height,
            source.rotation,
        )
        assert copy.image.src != source.image.src
        # 源图层不变
        assert document.store.get(image_layer_id) == source
        assert bridge.prompt_history == []

    @pytest.mark.asyncio
    async def test_requires_image_layer(self, bridge: GenerationBridge, generator) -> None:
        result = await bridge.remove_background()
        assert not result.success
        assert generator.calls == []


# ===================
# 后台任务与令牌
# ===================
class TestSubmitAndTokens:
    """测试后台提交、取消和过期结果."""

    @pytest.mark.asyncio
    async def test_submit_returns_immediately(
        self, bridge: GenerationBridge, document: DocumentSession, generator, results
    ) -> None:
        generator.gate = asyncio.Event()
        task = bridge.submit_generate("a red apple")

        await asyncio.sleep(0)
        assert bridge.pending_count == 1
        assert bridge.is_generating
        assert len(document.store) == 0

        generator.gate.set()
        result = await task
        assert result.success
        assert results == [result]
        assert bridge.pending_count == 0
        assert not bridge.is_generating

    @pytest.mark.asyncio
    async def test_submit_remove_background(
        self, bridge: GenerationBridge, document: DocumentSession, image_layer_id: str
    ) -> None:
        result = await bridge.submit_remove_background(image_layer_id)
        assert result.success
        assert result.operation == GenerationOperation.REMOVE_BACKGROUND
        assert len(document.store) == 2

    @pytest.mark.asyncio
    async def test_newer_submit_cancels_older(
        self,
        bridge: GenerationBridge,
        document: DocumentSession,
        generator: FakeGenerator,
        image_layer_id: str,
        results,
    ) -> None:
        generator.gate = asyncio.Event()
        first = bridge.submit_iterate("make it bold", image_layer_id)
        second = bridge.submit_iterate("make it calm", image_layer_id)

        generator.gate.set()
        result = await second

        with pytest.raises(asyncio.CancelledError):
            await first
        assert first.cancelled()
        assert result.success
        assert results == [result]

    @pytest.mark.asyncio
    async def test_stale_result_ignored(
        self,
        bridge: GenerationBridge,
        document: DocumentSession,
        make_png,
        image_layer_id: str,
    ) -> None:
        """测试同一目标的旧结果晚于新结果返回时被丢弃."""
        slow_png = make_png(size=(11, 11))
        fast_png = make_png(size=(22, 22))
        release_slow = asyncio.Event()

        async def generate_image(prompt: str, options: dict[str, Any]) -> list[bytes]:
            if prompt.endswith("slow"):
                await release_slow.wait()
                return [slow_png]
            return [fast_png]

        bridge = GenerationBridge(document, CallableImageGenerator(generate_image))
        slow = asyncio.create_task(bridge.iterate("slow", image_layer_id))
        await asyncio.sleep(0)

        fast = await bridge.iterate("fast", image_layer_id)
        release_slow.set()
        stale = await slow

        assert fast.success
        assert stale.stale
        assert not stale.success
        assert document.store.get(image_layer_id).image.original_width == 22

    @pytest.mark.asyncio
    async def test_different_targets_do_not_interfere(
        self, bridge: GenerationBridge, document: DocumentSession, generator
    ) -> None:
        generator.gate = asyncio.Event()
        first = bridge.submit_generate("one")
        second = bridge.submit_generate("two")
        generator.gate.set()

        results = await asyncio.gather(first, second)
        assert all(r.success for r in results)
        assert len(document.store) == 2

    @pytest.mark.asyncio
    async def test_cancel_all(
        self, bridge: GenerationBridge, document: DocumentSession, generator, results
    ) -> None:
        generator.gate = asyncio.Event()
        task = bridge.submit_generate("a red apple")
        await asyncio.sleep(0)

        assert bridge.cancel_all() == 1
        assert bridge.pending_count == 0
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(document.store) == 0
        assert results == []

    @pytest.mark.asyncio
    async def test_callback_error_does_not_break_bridge(
        self, document: DocumentSession, generator
    ) -> None:
        def broken_callback(result: GenerationResult) -> None:
            raise RuntimeError("boom")

        bridge = GenerationBridge(document, generator, on_complete=broken_callback)
        result = await bridge.generate("a red apple")
        assert result.success
        assert len(document.store) == 1
