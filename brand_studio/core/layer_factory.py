"""图层工厂.

按画布尺寸为新图层计算默认几何：居中并缩放到合适大小。
图片数据在创建图层前完成解码校验，无效数据不会产生图层。
"""

from __future__ import annotations

from typing import Optional

from brand_studio.models.brand_kit import BrandAsset
from brand_studio.models.canvas import Canvas
from brand_studio.models.layer import (
    DEFAULT_FILL_COLOR,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_STROKE_COLOR,
    DEFAULT_STROKE_WIDTH,
    DEFAULT_TEXT_CONTENT,
    FontStyle,
    FontWeight,
    ImagePayload,
    Layer,
    ShapeKind,
    ShapePayload,
    TextAlign,
    TextPayload,
)
from brand_studio.utils.constants import (
    ASSET_MAX_FRACTION,
    DEFAULT_TEXT_BOX_WIDTH,
    SHAPE_SIZE_FRACTION,
    UPLOAD_MAX_FRACTION,
)
from brand_studio.utils.image_utils import (
    decode_data_url,
    encode_data_url,
    fit_within,
    load_image_source,
    probe_image,
)


def create_text_layer(
    canvas: Canvas,
    number: int = 1,
    text: str = DEFAULT_TEXT_CONTENT,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size: float = DEFAULT_FONT_SIZE,
    font_weight: FontWeight = FontWeight.NORMAL,
    font_style: FontStyle = FontStyle.NORMAL,
    color: str = DEFAULT_FILL_COLOR,
    align: TextAlign = TextAlign.CENTER,
) -> Layer:
    """创建居中的文字图层.

    Args:
        canvas: 画布
        number: 图层序号，用于默认名称
        text: 文字内容
        font_family: 字体
        font_size: 字号
        font_weight: 字重
        font_style: 字形
        color: 颜色
        align: 对齐方式

    Returns:
        文字图层
    """
    return Layer(
        name=f"Text {number}",
        x=canvas.width / 2 - DEFAULT_TEXT_BOX_WIDTH / 2,
        y=canvas.height / 2 - 20,
        width=DEFAULT_TEXT_BOX_WIDTH,
        height=font_size * 1.5,
        payload=TextPayload(
            text=text,
            font_family=font_family,
            font_size=font_size,
            font_weight=font_weight,
            font_style=font_style,
            color=color,
            align=align,
        ),
    )


def create_shape_layer(
    canvas: Canvas,
    shape_kind: ShapeKind | str,
    number: int = 1,
    fill: str = DEFAULT_FILL_COLOR,
    stroke: str = DEFAULT_STROKE_COLOR,
    stroke_width: float = DEFAULT_STROKE_WIDTH,
) -> Layer:
    """创建居中的形状图层.

    形状边长为画布短边的 30%；线条的高度等于描边宽度，且填充为透明。
    """
    shape_kind = ShapeKind(shape_kind)
    size = canvas.short_side * SHAPE_SIZE_FRACTION
    is_line = shape_kind == ShapeKind.LINE
    height = stroke_width if is_line else size

    return Layer(
        name=f"{shape_kind.value.capitalize()} {number}",
        x=(canvas.width - size) / 2,
        y=(canvas.height - height) / 2,
        width=size,
        height=height,
        payload=ShapePayload(
            shape_kind=shape_kind,
            fill="transparent" if is_line else fill,
            stroke=stroke,
            stroke_width=stroke_width,
        ),
    )


def _fitted_image_layer(
    canvas: Canvas,
    src: str,
    original_size: tuple[int, int],
    name: str,
    max_fraction: float,
) -> Layer:
    width, height = fit_within(
        float(original_size[0]),
        float(original_size[1]),
        canvas.short_side * max_fraction,
    )
    return Layer(
        name=name,
        x=(canvas.width - width) / 2,
        y=(canvas.height - height) / 2,
        width=width,
        height=height,
        payload=ImagePayload(
            src=src,
            original_width=original_size[0],
            original_height=original_size[1],
        ),
    )


def create_image_layer(
    canvas: Canvas,
    data: bytes,
    number: int = 1,
    name: Optional[str] = None,
) -> Layer:
    """从上传的图片字节创建图层.

    图片按比例缩放到不超过画布短边的 80%，并居中放置。

    Raises:
        ImageDecodeError: 图片无法解码
    """
    width, height, mime_type = probe_image(data)
    return _fitted_image_layer(
        canvas,
        encode_data_url(data, mime_type),
        (width, height),
        name or f"Image {number}",
        UPLOAD_MAX_FRACTION,
    )


def create_asset_layer(canvas: Canvas, asset: BrandAsset) -> Layer:
    """把品牌素材放到画布上，缩放到不超过画布短边的 30%.

    Raises:
        ImageDecodeError: 素材无法加载
    """
    if asset.src.startswith("data:"):
        width, height, _ = probe_image(decode_data_url(asset.src))
    else:
        width, height = load_image_source(asset.src).size
    return _fitted_image_layer(
        canvas,
        asset.src,
        (width, height),
        asset.name,
        ASSET_MAX_FRACTION,
    )


def create_generated_layer(
    canvas: Canvas,
    data: bytes,
    number: int = 1,
) -> Layer:
    """从生成结果创建铺满画布的图片图层.

    Raises:
        ImageDecodeError: 图片无法解码
    """
    width, height, mime_type = probe_image(data)
    return Layer(
        name=f"AI Generated {number}",
        x=0,
        y=0,
        width=canvas.width,
        height=canvas.height,
        generated=True,
        payload=ImagePayload(
            src=encode_data_url(data, mime_type),
            original_width=width,
            original_height=height,
        ),
    )
