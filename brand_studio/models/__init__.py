"""数据模型模块."""

from brand_studio.models.brand_kit import AssetType, BrandAsset, BrandKit
from brand_studio.models.canvas import (
    CANVAS_PRESETS,
    AspectRatio,
    Canvas,
    CanvasPreset,
    get_preset,
)
from brand_studio.models.layer import (
    FontStyle,
    FontWeight,
    ImagePayload,
    Layer,
    LayerKind,
    ShapeKind,
    ShapePayload,
    TextAlign,
    TextPayload,
    generate_layer_id,
)
from brand_studio.models.version import VersionEntry

__all__ = [
    # 枚举
    "AspectRatio",
    "AssetType",
    "FontStyle",
    "FontWeight",
    "LayerKind",
    "ShapeKind",
    "TextAlign",
    # 图层
    "ImagePayload",
    "Layer",
    "ShapePayload",
    "TextPayload",
    "generate_layer_id",
    # 画布
    "CANVAS_PRESETS",
    "Canvas",
    "CanvasPreset",
    "get_preset",
    # 品牌与版本
    "BrandAsset",
    "BrandKit",
    "VersionEntry",
]
