"""通用辅助函数."""

from __future__ import annotations

import uuid

from PIL import ImageColor

RGBAColor = tuple[int, int, int, int]

TRANSPARENT: RGBAColor = (0, 0, 0, 0)


def generate_short_id(length: int = 9) -> str:
    """生成短ID.

    Args:
        length: ID长度

    Returns:
        短ID字符串
    """
    return uuid.uuid4().hex[:length]


def clamp(value: float, min_val: float, max_val: float) -> float:
    """限制数值范围.

    Args:
        value: 输入值
        min_val: 最小值
        max_val: 最大值

    Returns:
        限制后的值
    """
    return max(min_val, min(max_val, value))


def parse_color(color: str) -> RGBAColor:
    """将 CSS 颜色字符串解析为 RGBA 元组.

    支持 ``#RGB``、``#RRGGBB``、``#RRGGBBAA``、颜色名称、``rgb()``
    以及 ``transparent``。

    Args:
        color: 颜色字符串

    Returns:
        (r, g, b, a) 元组

    Raises:
        ValueError: 无法识别的颜色
    """
    value = color.strip()
    if not value or value.lower() in ("transparent", "none"):
        return TRANSPARENT

    rgb = ImageColor.getrgb(value)
    if len(rgb) == 3:
        return (*rgb, 255)
    return rgb  # type: ignore[return-value]
