"""品牌套件模型.

品牌套件是一张只读的复用值表：颜色、字体和标志素材。引擎只读取，
不会自动修改。
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from brand_studio.utils.helpers import generate_short_id, parse_color

DEFAULT_BRAND_COLORS = ["#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#EC4899"]
DEFAULT_BRAND_FONTS = ["Inter", "Roboto", "Open Sans", "Montserrat", "Playfair Display"]


class AssetType(str, Enum):
    """素材类型."""

    LOGO = "logo"
    IMAGE = "image"
    ICON = "icon"


class BrandAsset(BaseModel):
    """品牌素材.

    Attributes:
        id: 素材ID
        name: 素材名称
        type: 素材类型
        src: data URL 或文件路径
        tags: 标签
    """

    id: str = Field(default_factory=generate_short_id)
    name: str
    type: AssetType = AssetType.IMAGE
    src: str
    tags: list[str] = Field(default_factory=list)


class BrandKit(BaseModel):
    """品牌套件.

    Example:
        >>> kit = BrandKit()
        >>> kit.colors[0]
        '#3B82F6'
    """

    name: str = "My Brand"
    colors: list[str] = Field(default_factory=lambda: list(DEFAULT_BRAND_COLORS))
    fonts: list[str] = Field(default_factory=lambda: list(DEFAULT_BRAND_FONTS))
    logos: list[BrandAsset] = Field(default_factory=list)

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v: list[str]) -> list[str]:
        """验证颜色值可解析."""
        for color in v:
            parse_color(color)
        return v

    def add_color(self, color: str) -> None:
        """追加颜色（已存在则忽略）."""
        parse_color(color)
        if color not in self.colors:
            self.colors.append(color)

    def add_font(self, font: str) -> None:
        """追加字体（已存在则忽略）."""
        if font and font not in self.fonts:
            self.fonts.append(font)

    def add_asset(self, asset: BrandAsset) -> None:
        """追加素材."""
        self.logos.append(asset)

    def get_asset(self, asset_id: str) -> Optional[BrandAsset]:
        """按ID获取素材."""
        for asset in self.logos:
            if asset.id == asset_id:
                return asset
        return None

    def to_json(self, indent: int = 2) -> str:
        """序列化为JSON字符串."""
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False, indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "BrandKit":
        """从JSON字符串反序列化."""
        return cls.model_validate_json(json_str)
