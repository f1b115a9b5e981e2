"""合成渲染管线.

把有序图层列表渲染成一张 RGBA 画面。

Features:
    - 从底层到顶层依次绘制，顶层遮挡底层
    - 每个图层在局部坐标系中绘制，再围绕自身中心旋转
    - 只绘制图层落在画布内的部分，内存占用与画布大小相关
    - 不透明度渲染时限制到 0-1
    - 选中图层的虚线轮廓（轴对齐，不随图层旋转）

每次修改后完整重绘，没有脏区域优化。
"""

from __future__ import annotations

import hashlib
import math
from collections import OrderedDict
from typing import Callable, Optional, Sequence

from PIL import Image, ImageDraw

from brand_studio.core.fonts import find_font
from brand_studio.core.transform import Transform
from brand_studio.models.canvas import Canvas
from brand_studio.models.layer import (
    ImagePayload,
    Layer,
    ShapeKind,
    ShapePayload,
    TextAlign,
    TextPayload,
)
from brand_studio.utils.constants import (
    SELECTION_COLOR,
    SELECTION_DASH,
    SELECTION_GAP,
    SELECTION_PADDING,
    SELECTION_WIDTH,
)
from brand_studio.utils.exceptions import ImageDecodeError
from brand_studio.utils.helpers import parse_color
from brand_studio.utils.image_utils import draw_dashed_rectangle, load_image_source
from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

# 文字行距倍数
TEXT_LINE_HEIGHT = 1.2

# 旋转图层裁剪时四周多保留的像素，供插值采样
ROTATION_MARGIN = 2

# 瓦片坐标 (left, top, right, bottom)
Region = tuple[int, int, int, int]

ImageLoader = Callable[[str], Image.Image]


class ImageCache:
    """已解码图片的 LRU 缓存，按图片来源的摘要索引."""

    def __init__(self, loader: ImageLoader = load_image_source, max_size: int = 32) -> None:
        self._loader = loader
        self._max_size = max_size
        self._items: OrderedDict[str, Image.Image] = OrderedDict()

    @staticmethod
    def _key(src: str) -> str:
        return hashlib.sha1(src.encode("utf-8")).hexdigest()

    def get(self, src: str) -> Image.Image:
        """获取解码后的图片.

        Raises:
            ImageDecodeError: 图片无法加载
        """
        key = self._key(src)
        if key in self._items:
            self._items.move_to_end(key)
            return self._items[key]

        image = self._loader(src)
        self._items[key] = image
        if len(self._items) > self._max_size:
            self._items.popitem(last=False)
        return image

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class CompositeRenderer:
    """合成渲染器.

    Example:
        >>> renderer = CompositeRenderer()
        >>> surface = renderer.render(store.layers, Canvas(), store.selected_id)
        >>> surface.size
        (1080, 1080)
    """

    def __init__(self, image_cache: Optional[ImageCache] = None) -> None:
        self._images = image_cache or ImageCache()

    @property
    def image_cache(self) -> ImageCache:
        return self._images

    def render(
        self,
        layers: Sequence[Layer],
        canvas: Canvas,
        selected_id: Optional[str] = None,
    ) -> Image.Image:
        """渲染图层到画面.

        Args:
            layers: 图层序列（索引 0 为顶层）
            canvas: 画布
            selected_id: 选中图层ID，为 None 时不绘制选中框

        Returns:
            画布尺寸的 RGBA 图片
        """
        surface = Image.new("RGBA", canvas.size, parse_color(canvas.background_color))

        # 底层先画
        for layer in reversed(layers):
            if not layer.visible:
                continue
            try:
                self._render_layer(surface, layer)
            except Exception as e:
                logger.error(f"渲染图层失败: {layer.id}, 错误: {e}")

        if selected_id is not None:
            selected = next((layer for layer in layers if layer.id == selected_id), None)
            if selected is not None:
                self._draw_selection(surface, selected)

        return surface

    def render_tile(
        self,
        layer: Layer,
        region: Optional[Region] = None,
    ) -> Optional[Image.Image]:
        """在局部坐标系中绘制图层内容（未旋转、未应用不透明度）.

        Args:
            layer: 图层
            region: 只绘制瓦片中 (left, top, right, bottom) 范围内的像素，
                默认绘制整个图层

        Returns:
            区域尺寸的 RGBA 图片，没有可绘制内容时返回 None
        """
        tile_size = _tile_size(layer)
        if tile_size is None:
            return None
        if region is None:
            region = (0, 0, tile_size[0], tile_size[1])
        if region[2] <= region[0] or region[3] <= region[1]:
            return None

        payload = layer.payload
        if isinstance(payload, ImagePayload):
            return self._draw_image(payload, tile_size, region)
        if isinstance(payload, TextPayload):
            return self._draw_text(payload, tile_size, region)
        if isinstance(payload, ShapePayload):
            return self._draw_shape(payload, tile_size, region)

        logger.warning(f"未知图层内容类型: {type(payload)}")
        return None

    # ===================
    # 内部方法
    # ===================

    def _render_layer(self, surface: Image.Image, layer: Layer) -> None:
        transform = Transform.from_layer(layer)
        opacity = transform.effective_opacity
        if opacity <= 0:
            return

        tile_size = _tile_size(layer)
        if tile_size is None:
            return

        # 只绘制落在画布内的部分
        region = _visible_region(transform, tile_size, surface.size)
        if region is None:
            return

        tile = self.render_tile(layer, region)
        if tile is None:
            return

        if opacity < 1:
            alpha = tile.getchannel("A").point(lambda p: round(p * opacity))
            tile.putalpha(alpha)

        left, top, right, bottom = region
        if transform.is_rotated:
            # PIL 正角度为逆时针
            tile = tile.rotate(
                -transform.normalized_rotation,
                resample=Image.Resampling.BICUBIC,
                expand=True,
            )
            # 区域中心相对图层中心的偏移，旋转后得到区域中心的文档坐标
            dx = (left + right) / 2 - tile_size[0] / 2
            dy = (top + bottom) / 2 - tile_size[1] / 2
            px, py = transform.to_document(
                (transform.width / 2 + dx, transform.height / 2 + dy)
            )
            dest = (round(px - tile.width / 2), round(py - tile.height / 2))
        else:
            origin_x, origin_y = _tile_origin(transform, tile_size)
            dest = (origin_x + left, origin_y + top)

        _composite_clipped(surface, tile, dest)

    def _draw_image(
        self,
        payload: ImagePayload,
        tile_size: tuple[int, int],
        region: Region,
    ) -> Optional[Image.Image]:
        try:
            source = self._images.get(payload.src)
        except ImageDecodeError as e:
            logger.warning(f"图片图层无法加载，跳过: {e}")
            return None

        left, top, right, bottom = region
        scale_x = source.width / tile_size[0]
        scale_y = source.height / tile_size[1]
        return source.resize(
            (right - left, bottom - top),
            Image.Resampling.LANCZOS,
            box=(left * scale_x, top * scale_y, right * scale_x, bottom * scale_y),
        )

    def _draw_text(
        self,
        payload: TextPayload,
        tile_size: tuple[int, int],
        region: Region,
    ) -> Optional[Image.Image]:
        if not payload.text:
            return None

        left, top, right, bottom = region
        tile = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
        draw = ImageDraw.Draw(tile)
        font_size = max(1, round(payload.font_size))
        font = find_font(payload.font_family, font_size, payload.is_bold, payload.is_italic)
        fill = parse_color(payload.color)
        line_advance = font_size * TEXT_LINE_HEIGHT

        width = tile_size[0]
        y = 0.0
        for line in payload.text.split("\n"):
            if line:
                line_width = draw.textlength(line, font=font)
                if payload.align == TextAlign.CENTER:
                    x = (width - line_width) / 2
                elif payload.align == TextAlign.RIGHT:
                    x = width - line_width
                else:
                    x = 0.0
                draw.text((x - left, y - top), line, font=font, fill=fill)
            y += line_advance

        return tile

    def _draw_shape(
        self,
        payload: ShapePayload,
        tile_size: tuple[int, int],
        region: Region,
    ) -> Image.Image:
        left, top, right, bottom = region
        tile = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
        draw = ImageDraw.Draw(tile)
        w, h = tile_size

        stroke = parse_color(payload.stroke)
        stroke_width = round(payload.stroke_width)

        if payload.shape_kind == ShapeKind.LINE:
            # 线条忽略填充，宽度至少 1 像素
            mid = h / 2 - top
            draw.line([(-left, mid), (w - left, mid)], fill=stroke, width=max(1, stroke_width))
            return tile

        fill = parse_color(payload.fill)
        fill_arg = fill if fill[3] > 0 else None
        outline_arg = stroke if payload.stroke_width > 0 else None
        outline_width = max(1, stroke_width) if outline_arg else 0
        # 整个图层的外框，平移到区域坐标
        box = (-left, -top, w - 1 - left, h - 1 - top)

        if payload.shape_kind == ShapeKind.CIRCLE:
            draw.ellipse(box, fill=fill_arg, outline=outline_arg, width=outline_width)
        else:
            draw.rectangle(box, fill=fill_arg, outline=outline_arg, width=outline_width)
        return tile

    def _draw_selection(self, surface: Image.Image, layer: Layer) -> None:
        draw = ImageDraw.Draw(surface)
        pad = SELECTION_PADDING
        left, top, right, bottom = layer.bounds
        draw_dashed_rectangle(
            draw,
            (left - pad, top - pad, right + pad, bottom + pad),
            parse_color(SELECTION_COLOR),
            width=SELECTION_WIDTH,
            dash_length=SELECTION_DASH,
            gap_length=SELECTION_GAP,
        )


def _tile_size(layer: Layer) -> Optional[tuple[int, int]]:
    """图层瓦片的像素尺寸，宽或高为 0 时返回 None."""
    tile_w = math.ceil(layer.width)
    tile_h = math.ceil(layer.height)
    if tile_w <= 0 or tile_h <= 0:
        return None
    return tile_w, tile_h


def _tile_origin(transform: Transform, tile_size: tuple[int, int]) -> tuple[int, int]:
    """未旋转瓦片左上角在画布上的像素位置（瓦片以图层中心对齐）."""
    cx, cy = transform.center
    return round(cx - tile_size[0] / 2), round(cy - tile_size[1] / 2)


def _visible_region(
    transform: Transform,
    tile_size: tuple[int, int],
    canvas_size: tuple[int, int],
) -> Optional[Region]:
    """计算瓦片中会落在画布上的像素区域.

    Returns:
        瓦片坐标 (left, top, right, bottom)，完全在画布外时返回 None
    """
    tile_w, tile_h = tile_size
    canvas_w, canvas_h = canvas_size

    if not transform.is_rotated:
        left, top = _tile_origin(transform, tile_size)
        region = (
            max(0, -left),
            max(0, -top),
            min(tile_w, canvas_w - left),
            min(tile_h, canvas_h - top),
        )
    else:
        b_left, b_top, b_right, b_bottom = transform.rotated_bounds()
        v_left, v_top = max(0.0, b_left), max(0.0, b_top)
        v_right, v_bottom = min(float(canvas_w), b_right), min(float(canvas_h), b_bottom)
        if v_left >= v_right or v_top >= v_bottom:
            return None

        # 画布上的可见矩形映射回瓦片坐标，瓦片与图层共用中心
        off_x = (tile_w - transform.width) / 2
        off_y = (tile_h - transform.height) / 2
        points = [
            transform.to_local(p)
            for p in ((v_left, v_top), (v_right, v_top), (v_right, v_bottom), (v_left, v_bottom))
        ]
        xs = [p[0] + off_x for p in points]
        ys = [p[1] + off_y for p in points]
        margin = ROTATION_MARGIN
        region = (
            max(0, math.floor(min(xs)) - margin),
            max(0, math.floor(min(ys)) - margin),
            min(tile_w, math.ceil(max(xs)) + margin),
            min(tile_h, math.ceil(max(ys)) + margin),
        )

    if region[0] >= region[2] or region[1] >= region[3]:
        return None
    return region


def _composite_clipped(surface: Image.Image, tile: Image.Image, dest: tuple[int, int]) -> None:
    """把瓦片就地合成到画面上，超出画面的部分被裁掉."""
    x, y = dest
    src_left, src_top = max(0, -x), max(0, -y)
    src_right = min(tile.width, surface.width - x)
    src_bottom = min(tile.height, surface.height - y)
    if src_left >= src_right or src_top >= src_bottom:
        return
    surface.alpha_composite(
        tile,
        dest=(x + src_left, y + src_top),
        source=(src_left, src_top, src_right, src_bottom),
    )
