"""画布与尺寸预设模型."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from brand_studio.utils.constants import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
)
from brand_studio.utils.helpers import parse_color


class AspectRatio(str, Enum):
    """生成服务支持的宽高比."""

    SQUARE = "1:1"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"


class CanvasPreset(BaseModel):
    """命名画布尺寸预设."""

    model_config = ConfigDict(frozen=True)

    name: str
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    icon: str = ""


CANVAS_PRESETS: tuple[CanvasPreset, ...] = (
    CanvasPreset(name="Instagram Post", width=1080, height=1080, icon="📱"),
    CanvasPreset(name="Instagram Story", width=1080, height=1920, icon="📱"),
    CanvasPreset(name="Facebook Post", width=1200, height=630, icon="📘"),
    CanvasPreset(name="Twitter/X Post", width=1200, height=675, icon="🐦"),
    CanvasPreset(name="LinkedIn Post", width=1200, height=627, icon="💼"),
    CanvasPreset(name="YouTube Thumbnail", width=1280, height=720, icon="▶️"),
    CanvasPreset(name="Web Banner", width=1920, height=600, icon="🖥️"),
    CanvasPreset(name="Email Header", width=600, height=200, icon="📧"),
    CanvasPreset(name="Ad - Leaderboard", width=728, height=90, icon="📊"),
    CanvasPreset(name="Ad - Medium Rectangle", width=300, height=250, icon="📊"),
    CanvasPreset(name="Custom", width=1200, height=800, icon="✏️"),
)

DEFAULT_PRESET_NAME = "Instagram Post"


def get_preset(name: str) -> CanvasPreset:
    """按名称查找预设.

    Args:
        name: 预设名称

    Returns:
        CanvasPreset 实例

    Raises:
        KeyError: 预设不存在
    """
    for preset in CANVAS_PRESETS:
        if preset.name == name:
            return preset
    raise KeyError(f"未知的画布预设: {name}")


class Canvas(BaseModel):
    """文档画布.

    Attributes:
        width: 宽度（像素）
        height: 高度（像素）
        preset_name: 当前预设名称，自定义尺寸时为 None
        background_color: 背景颜色
    """

    model_config = ConfigDict(validate_assignment=True)

    width: int = Field(default=DEFAULT_CANVAS_WIDTH, ge=1, le=8192)
    height: int = Field(default=DEFAULT_CANVAS_HEIGHT, ge=1, le=8192)
    preset_name: Optional[str] = Field(default=DEFAULT_PRESET_NAME)
    background_color: str = Field(default=DEFAULT_BACKGROUND_COLOR)

    @field_validator("background_color")
    @classmethod
    def validate_background(cls, v: str) -> str:
        """验证背景色可解析."""
        parse_color(v)
        return v

    @classmethod
    def from_preset(cls, preset: CanvasPreset | str, **kwargs) -> "Canvas":
        """从预设创建画布."""
        if isinstance(preset, str):
            preset = get_preset(preset)
        return cls(width=preset.width, height=preset.height, preset_name=preset.name, **kwargs)

    @property
    def size(self) -> tuple[int, int]:
        """画布尺寸."""
        return (self.width, self.height)

    @property
    def short_side(self) -> int:
        """画布短边长度."""
        return min(self.width, self.height)

    @property
    def aspect_ratio_hint(self) -> AspectRatio:
        """生成图片时使用的宽高比提示."""
        if self.width == self.height:
            return AspectRatio.SQUARE
        if self.width > self.height:
            return AspectRatio.LANDSCAPE
        return AspectRatio.PORTRAIT
