"""图层几何变换.

纯几何工具：由位置、尺寸、旋转和不透明度解析出渲染与命中测试共用的
仿射变换。局部坐标系原点在图层左上角，旋转围绕图层中心顺时针进行
（文档坐标 Y 轴向下）。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from brand_studio.utils.helpers import clamp

Point = tuple[float, float]
# (a, b, c, d, e, f): X = a*x + b*y + c, Y = d*x + e*y + f
AffineMatrix = tuple[float, float, float, float, float, float]


class HasGeometry(Protocol):
    x: float
    y: float
    width: float
    height: float
    rotation: float
    opacity: float


@dataclass(frozen=True)
class Transform:
    """图层变换.

    Attributes:
        x: 左上角X坐标
        y: 左上角Y坐标
        width: 宽度
        height: 高度
        rotation: 旋转角度（度，顺时针，可未归一化）
        opacity: 不透明度（可超出 0-1）
    """

    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    opacity: float = 1.0

    @classmethod
    def from_layer(cls, layer: HasGeometry) -> "Transform":
        """从图层读取变换."""
        return cls(
            x=layer.x,
            y=layer.y,
            width=layer.width,
            height=layer.height,
            rotation=layer.rotation,
            opacity=layer.opacity,
        )

    @property
    def normalized_rotation(self) -> float:
        """归一化到 [0, 360) 的旋转角度."""
        angle = math.fmod(self.rotation, 360.0)
        if angle < 0:
            angle += 360.0
        # fmod 对极小负数可能得到 360.0
        return 0.0 if angle >= 360.0 else angle

    @property
    def effective_opacity(self) -> float:
        """限制到 [0, 1] 的不透明度."""
        return clamp(self.opacity, 0.0, 1.0)

    @property
    def center(self) -> Point:
        """图层中心点（文档坐标）."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_rotated(self) -> bool:
        return self.normalized_rotation != 0.0

    def matrix(self) -> AffineMatrix:
        """局部坐标到文档坐标的仿射矩阵.

        等价于 translate(center) · rotate(θ) · translate(-width/2, -height/2)。
        """
        theta = math.radians(self.normalized_rotation)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        cx, cy = self.center
        hw, hh = self.width / 2, self.height / 2
        return (
            cos_t,
            -sin_t,
            cx - cos_t * hw + sin_t * hh,
            sin_t,
            cos_t,
            cy - sin_t * hw - cos_t * hh,
        )

    def to_document(self, point: Point) -> Point:
        """局部坐标转文档坐标."""
        a, b, c, d, e, f = self.matrix()
        px, py = point
        return (a * px + b * py + c, d * px + e * py + f)

    def to_local(self, point: Point) -> Point:
        """文档坐标转局部坐标."""
        theta = math.radians(self.normalized_rotation)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        cx, cy = self.center
        dx, dy = point[0] - cx, point[1] - cy
        # 逆旋转
        lx = cos_t * dx + sin_t * dy
        ly = -sin_t * dx + cos_t * dy
        return (lx + self.width / 2, ly + self.height / 2)

    def corners(self) -> list[Point]:
        """旋转后的四个角（左上、右上、右下、左下）."""
        return [
            self.to_document((0.0, 0.0)),
            self.to_document((self.width, 0.0)),
            self.to_document((self.width, self.height)),
            self.to_document((0.0, self.height)),
        ]

    def axis_aligned_bounds(self) -> tuple[float, float, float, float]:
        """未旋转的边界框 (left, top, right, bottom)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def rotated_bounds(self) -> tuple[float, float, float, float]:
        """旋转后外接矩形 (left, top, right, bottom)."""
        xs, ys = zip(*self.corners())
        return (min(xs), min(ys), max(xs), max(ys))

    def contains(self, point: Point, respect_rotation: bool = False) -> bool:
        """判断点是否在图层内（边界包含在内）.

        Args:
            point: 文档坐标
            respect_rotation: 是否按旋转后的矩形判断，默认按未旋转的边界框

        Returns:
            是否包含
        """
        if respect_rotation and self.is_rotated:
            lx, ly = self.to_local(point)
            eps = 1e-9
            return -eps <= lx <= self.width + eps and -eps <= ly <= self.height + eps

        left, top, right, bottom = self.axis_aligned_bounds()
        px, py = point
        return left <= px <= right and top <= py <= bottom
