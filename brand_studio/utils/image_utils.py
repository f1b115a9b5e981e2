"""图片处理工具函数.

负责图片来源（data URL / 文件路径）的编解码、尺寸探测和编码输出。
"""

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageDraw, UnidentifiedImageError

from brand_studio.utils.exceptions import ImageDecodeError

DATA_URL_PREFIX = "data:"

# 格式名到 MIME 类型
MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}


def encode_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """将图片字节编码为 data URL.

    Args:
        data: 图片字节数据
        mime_type: MIME 类型

    Returns:
        data URL 字符串
    """
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{b64}"


def decode_data_url(src: str) -> bytes:
    """解码 data URL.

    Args:
        src: data URL 字符串

    Returns:
        字节数据

    Raises:
        ImageDecodeError: 不是合法的 base64 data URL
    """
    header, sep, payload = src.partition(",")
    if not sep or ";base64" not in header:
        raise ImageDecodeError("仅支持 base64 编码的 data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"base64 解码失败: {e}") from e


def bytes_to_image(data: bytes) -> Image.Image:
    """字节数据转图片，并完成解码校验.

    Args:
        data: 图片字节数据

    Returns:
        已加载的 PIL Image 对象

    Raises:
        ImageDecodeError: 数据为空、格式不支持或已损坏
    """
    if not data:
        raise ImageDecodeError("数据为空")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(str(e)) from e

    if image.width <= 0 or image.height <= 0:
        raise ImageDecodeError(f"无效的图片尺寸: {image.size}")
    return image


def probe_image(data: bytes) -> Tuple[int, int, str]:
    """探测图片尺寸和 MIME 类型.

    Args:
        data: 图片字节数据

    Returns:
        (width, height, mime_type)

    Raises:
        ImageDecodeError: 图片无法解码
    """
    image = bytes_to_image(data)
    mime_type = MIME_TYPES.get(image.format or "", "image/png")
    return image.width, image.height, mime_type


def load_image_source(src: str) -> Image.Image:
    """加载图片来源.

    Args:
        src: data URL 或本地文件路径

    Returns:
        RGBA 模式的 PIL Image 对象

    Raises:
        ImageDecodeError: 来源无效或无法解码
    """
    if src.startswith(DATA_URL_PREFIX):
        data = decode_data_url(src)
    else:
        path = Path(src)
        if not path.is_file():
            raise ImageDecodeError(f"文件不存在: {src}")
        data = path.read_bytes()

    image = bytes_to_image(data)
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return image


def fit_within(
    width: float,
    height: float,
    max_size: float,
) -> Tuple[float, float]:
    """按比例缩小尺寸，使长边不超过 max_size.

    已经足够小的尺寸原样返回。

    Args:
        width: 原宽度
        height: 原高度
        max_size: 长边上限

    Returns:
        (width, height)
    """
    if width > max_size or height > max_size:
        scale = max_size / max(width, height)
        return width * scale, height * scale
    return width, height


def image_to_bytes(
    image: Image.Image,
    format: str = "PNG",
    quality: int = 95,
    background: Tuple[int, int, int] = (255, 255, 255),
) -> bytes:
    """图片转字节数据.

    JPEG 不支持透明通道，透明像素会被合成到 background 上。

    Args:
        image: PIL Image 对象
        format: 图片格式
        quality: 有损格式的质量 (1-100)
        background: JPEG 的底色

    Returns:
        图片字节数据
    """
    format = format.upper()
    output = io.BytesIO()

    if format == "JPEG":
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            flat = Image.new("RGB", rgba.size, background)
            flat.paste(rgba, mask=rgba.split()[3])
            image = flat
        elif image.mode != "RGB":
            image = image.convert("RGB")
        image.save(output, format="JPEG", quality=quality, optimize=True)
    else:
        image.save(output, format=format)

    return output.getvalue()


def draw_dashed_rectangle(
    draw: ImageDraw.ImageDraw,
    box: Tuple[float, float, float, float],
    color: Tuple[int, int, int, int],
    width: int = 1,
    dash_length: int = 5,
    gap_length: int = 5,
) -> None:
    """绘制虚线矩形.

    Args:
        draw: ImageDraw 对象
        box: (left, top, right, bottom)
        color: 线条颜色
        width: 线宽
        dash_length: 虚线段长度
        gap_length: 虚线间隔长度
    """
    left, top, right, bottom = box
    step = dash_length + gap_length

    # 上边和下边
    x = left
    while x < right:
        x_end = min(x + dash_length, right)
        draw.line([(x, top), (x_end, top)], fill=color, width=width)
        draw.line([(x, bottom), (x_end, bottom)], fill=color, width=width)
        x += step

    # 左边和右边
    y = top
    while y < bottom:
        y_end = min(y + dash_length, bottom)
        draw.line([(left, y), (left, y_end)], fill=color, width=width)
        draw.line([(right, y), (right, y_end)], fill=color, width=width)
        y += step
