"""图层数据模型.

图层由通用几何属性和按类型区分的内容（图片、文字、形状）组成。

Features:
    - 以 ``type`` 为判别字段的内容联合类型
    - 图层类型与内容类型一致性校验
    - 几何属性有限数校验
    - 浅合并更新与克隆
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from brand_studio.utils.helpers import generate_short_id


# ===================
# 常量定义
# ===================

DEFAULT_TEXT_CONTENT = "Add Text"
DEFAULT_FONT_FAMILY = "Inter"
DEFAULT_FONT_SIZE = 32
DEFAULT_FILL_COLOR = "#3B82F6"
DEFAULT_STROKE_COLOR = "#000000"
DEFAULT_STROKE_WIDTH = 2


# ===================
# 枚举定义
# ===================


class LayerKind(str, Enum):
    """图层类型."""

    IMAGE = "image"
    TEXT = "text"
    SHAPE = "shape"


class ShapeKind(str, Enum):
    """形状类型."""

    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    LINE = "line"


class TextAlign(str, Enum):
    """文字水平对齐方式."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontWeight(str, Enum):
    """字重."""

    NORMAL = "normal"
    BOLD = "bold"


class FontStyle(str, Enum):
    """字形."""

    NORMAL = "normal"
    ITALIC = "italic"


def generate_layer_id() -> str:
    """生成唯一的图层ID."""
    return generate_short_id(9)


# ===================
# 图层内容
# ===================


class ImagePayload(BaseModel):
    """图片内容.

    Attributes:
        src: data URL 或本地文件路径
        original_width: 原图宽度
        original_height: 原图高度
    """

    type: Literal["image"] = "image"
    src: str = Field(description="图片来源")
    original_width: int = Field(default=0, ge=0, description="原图宽度")
    original_height: int = Field(default=0, ge=0, description="原图高度")


class TextPayload(BaseModel):
    """文字内容."""

    type: Literal["text"] = "text"
    text: str = Field(default=DEFAULT_TEXT_CONTENT, description="文字内容")
    font_family: str = Field(default=DEFAULT_FONT_FAMILY, description="字体名称")
    font_size: float = Field(default=DEFAULT_FONT_SIZE, gt=0, le=1000, description="字号")
    font_weight: FontWeight = Field(default=FontWeight.NORMAL, description="字重")
    font_style: FontStyle = Field(default=FontStyle.NORMAL, description="字形")
    color: str = Field(default=DEFAULT_FILL_COLOR, description="文字颜色")
    align: TextAlign = Field(default=TextAlign.CENTER, description="对齐方式")

    @property
    def is_bold(self) -> bool:
        return self.font_weight == FontWeight.BOLD

    @property
    def is_italic(self) -> bool:
        return self.font_style == FontStyle.ITALIC


class ShapePayload(BaseModel):
    """形状内容.

    线条形状忽略填充色，只使用描边。
    """

    type: Literal["shape"] = "shape"
    shape_kind: ShapeKind = Field(default=ShapeKind.RECTANGLE, description="形状类型")
    fill: str = Field(default=DEFAULT_FILL_COLOR, description="填充颜色")
    stroke: str = Field(default=DEFAULT_STROKE_COLOR, description="描边颜色")
    stroke_width: float = Field(default=DEFAULT_STROKE_WIDTH, ge=0, description="描边宽度")


LayerPayload = Annotated[
    Union[ImagePayload, TextPayload, ShapePayload],
    Field(discriminator="type"),
]


# ===================
# 图层
# ===================


class Layer(BaseModel):
    """图层.

    Attributes:
        id: 图层唯一标识符
        name: 显示名称（可重复）
        kind: 图层类型，创建后不可变，必须与 ``payload.type`` 一致
        visible: 是否参与渲染
        locked: 是否锁定（锁定图层仍然渲染，但不参与点击选中）
        x: 左上角X坐标（文档坐标）
        y: 左上角Y坐标
        width: 宽度，>= 0
        height: 高度，>= 0
        rotation: 顺时针旋转角度（任意实数，渲染时取模）
        opacity: 不透明度（渲染时限制在 0-1）
        generated: 是否由 AI 生成
        payload: 图层内容

    Example:
        >>> layer = Layer(name="Logo", payload=ShapePayload())
        >>> layer.kind
        <LayerKind.SHAPE: 'shape'>
    """

    model_config = ConfigDict(
        validate_assignment=True,
        allow_inf_nan=False,
    )

    id: str = Field(default_factory=generate_layer_id, description="图层唯一ID")
    name: str = Field(default="Layer", description="图层名称")
    kind: LayerKind = Field(description="图层类型")

    visible: bool = Field(default=True, description="是否可见")
    locked: bool = Field(default=False, description="是否锁定")

    x: float = Field(default=0.0, description="X坐标")
    y: float = Field(default=0.0, description="Y坐标")
    width: float = Field(default=100.0, ge=0, description="宽度")
    height: float = Field(default=100.0, ge=0, description="高度")

    rotation: float = Field(default=0.0, description="旋转角度")
    opacity: float = Field(default=1.0, description="不透明度")

    generated: bool = Field(default=False, description="是否由 AI 生成")
    payload: LayerPayload

    @model_validator(mode="before")
    @classmethod
    def fill_kind_from_payload(cls, data: Any) -> Any:
        """未指定 kind 时由内容类型推断."""
        if isinstance(data, dict) and data.get("kind") is None:
            payload = data.get("payload")
            payload_type = (
                payload.get("type") if isinstance(payload, dict) else getattr(payload, "type", None)
            )
            if payload_type is not None:
                data = {**data, "kind": payload_type}
        return data

    @model_validator(mode="after")
    def check_kind_matches_payload(self) -> "Layer":
        """校验图层类型与内容类型一致."""
        if self.kind.value != self.payload.type:
            raise ValueError(
                f"图层类型 '{self.kind.value}' 与内容类型 '{self.payload.type}' 不一致"
            )
        return self

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """未旋转的边界框 (left, top, right, bottom)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    @property
    def center(self) -> tuple[float, float]:
        """图层中心点."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def image(self) -> Optional[ImagePayload]:
        """图片内容，非图片图层返回 None."""
        return self.payload if isinstance(self.payload, ImagePayload) else None

    @property
    def text(self) -> Optional[TextPayload]:
        """文字内容，非文字图层返回 None."""
        return self.payload if isinstance(self.payload, TextPayload) else None

    @property
    def shape(self) -> Optional[ShapePayload]:
        """形状内容，非形状图层返回 None."""
        return self.payload if isinstance(self.payload, ShapePayload) else None

    def merged(self, **fields: Any) -> "Layer":
        """返回浅合并字段后的新图层（完整校验）.

        Args:
            **fields: 要覆盖的字段

        Returns:
            新的图层实例

        Raises:
            pydantic.ValidationError: 合并结果无效
        """
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(fields)
        return type(self).model_validate(data)

    def clone(
        self,
        new_id: Optional[str] = None,
        name_suffix: str = " copy",
        offset: float = 0.0,
    ) -> "Layer":
        """克隆图层.

        Args:
            new_id: 新ID，默认自动生成
            name_suffix: 名称后缀
            offset: X/Y 方向的位置偏移

        Returns:
            深拷贝后的新图层
        """
        return self.model_copy(
            deep=True,
            update={
                "id": new_id or generate_layer_id(),
                "name": f"{self.name}{name_suffix}",
                "x": self.x + offset,
                "y": self.y + offset,
            },
        )
