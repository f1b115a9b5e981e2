"""Pytest 配置和共享 fixtures."""

from __future__ import annotations

import io
from typing import Callable

import pytest
from PIL import Image

from brand_studio.core.document import DocumentSession
from brand_studio.models.canvas import Canvas
from brand_studio.models.layer import Layer, ShapeKind, ShapePayload

PngFactory = Callable[..., bytes]
ShapeFactory = Callable[..., Layer]


@pytest.fixture
def make_png() -> PngFactory:
    """返回生成图片字节的工厂函数."""

    def _make(
        size: tuple[int, int] = (64, 48),
        color: tuple[int, ...] = (255, 0, 0, 255),
        format: str = "PNG",
    ) -> bytes:
        mode = "RGB" if format == "JPEG" else "RGBA"
        img = Image.new(mode, size, color[: len(mode)])
        buffer = io.BytesIO()
        img.save(buffer, format=format)
        return buffer.getvalue()

    return _make


@pytest.fixture
def png_bytes(make_png: PngFactory) -> bytes:
    """64x48 的红色 PNG."""
    return make_png()


@pytest.fixture
def make_shape() -> ShapeFactory:
    """返回创建形状图层的工厂函数（默认无描边）."""

    def _make(
        x: float,
        y: float,
        width: float,
        height: float,
        fill: str = "#ff0000",
        shape_kind: ShapeKind = ShapeKind.RECTANGLE,
        **fields,
    ) -> Layer:
        return Layer(
            x=x,
            y=y,
            width=width,
            height=height,
            payload=ShapePayload(shape_kind=shape_kind, fill=fill, stroke_width=0),
            **fields,
        )

    return _make


@pytest.fixture
def canvas() -> Canvas:
    """1080x1080 白色画布."""
    return Canvas()


@pytest.fixture
def document(canvas: Canvas) -> DocumentSession:
    """空文档."""
    return DocumentSession(canvas=canvas)
