"""点击命中测试.

按存储顺序（顶层在前）查找包含指定点的第一个可见、未锁定图层。
默认使用未旋转的边界框判断，与选中框的绘制方式一致；旋转感知的判断
需要显式开启。
"""

from __future__ import annotations

from typing import Iterable, Optional

from brand_studio.core.transform import Point, Transform
from brand_studio.models.layer import Layer


def is_hittable(layer: Layer) -> bool:
    """图层是否参与命中测试."""
    return layer.visible and not layer.locked


def hit_test(
    layers: Iterable[Layer],
    point: Point,
    respect_rotation: bool = False,
) -> Optional[str]:
    """查找点击位置的顶层图层.

    Args:
        layers: 图层序列（索引 0 为顶层）
        point: 文档坐标
        respect_rotation: 是否按旋转后的矩形判断

    Returns:
        命中的图层ID，未命中返回 None
    """
    for layer in layers:
        if not is_hittable(layer):
            continue
        if Transform.from_layer(layer).contains(point, respect_rotation=respect_rotation):
            return layer.id
    return None

