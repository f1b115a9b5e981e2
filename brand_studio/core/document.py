"""文档会话.

把画布、图层存储、渲染器、版本快照和导出器组合成一个可编辑的文档。
图层存储每次变更后同步重新渲染，``surface`` 始终反映最新状态。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from PIL import Image

from brand_studio.core.config_manager import ConfigManager, get_config
from brand_studio.core.hit_tester import hit_test
from brand_studio.core.layer_factory import (
    create_asset_layer,
    create_image_layer,
    create_shape_layer,
    create_text_layer,
)
from brand_studio.core.layer_store import Direction, LayerStore
from brand_studio.core.renderer import CompositeRenderer
from brand_studio.models.app_settings import Settings
from brand_studio.models.brand_kit import AssetType, BrandAsset, BrandKit
from brand_studio.models.canvas import Canvas, get_preset
from brand_studio.models.layer import Layer, ShapeKind
from brand_studio.models.version import VersionEntry
from brand_studio.services.exporter import Exporter, ExportFormat
from brand_studio.services.version_history import VersionHistory
from brand_studio.utils.helpers import parse_color
from brand_studio.utils.image_utils import encode_data_url, probe_image
from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class DocumentSession:
    """文档会话.

    Attributes:
        canvas: 画布
        store: 图层存储
        brand_kit: 品牌套件（只读取，不自动修改）
        versions: 版本快照

    Example:
        >>> doc = DocumentSession()
        >>> rect_id = doc.add_shape_layer("rectangle")
        >>> doc.click((540, 540))
        '...'
    """

    def __init__(
        self,
        canvas: Optional[Canvas] = None,
        brand_kit: Optional[BrandKit] = None,
        renderer: Optional[CompositeRenderer] = None,
        versions: Optional[VersionHistory] = None,
        exporter: Optional[Exporter] = None,
        layers: Optional[list[Layer]] = None,
    ) -> None:
        self.canvas = canvas or Canvas()
        self.brand_kit = brand_kit or BrandKit()
        self.store = LayerStore(layers)
        self.versions = versions or VersionHistory()
        self._renderer = renderer or CompositeRenderer()
        self._exporter = exporter or Exporter()
        self._surface: Optional[Image.Image] = None
        self._render_count = 0

        self.store.subscribe(lambda _store: self.render())
        self.render()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        brand_kit: Optional[BrandKit] = None,
    ) -> "DocumentSession":
        """按应用设置创建文档."""
        return cls(
            canvas=Canvas(
                width=settings.canvas_width,
                height=settings.canvas_height,
                preset_name=None,
                background_color=settings.background_color,
            ),
            brand_kit=brand_kit,
            versions=VersionHistory(
                thumbnail_quality=settings.thumbnail_quality,
                thumbnail_max_size=settings.thumbnail_max_size,
            ),
            exporter=Exporter(default_quality=settings.export_quality),
        )

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None) -> "DocumentSession":
        """按配置管理器创建文档，带入已保存的品牌套件.

        Args:
            config: 配置管理器，默认使用全局实例
        """
        config = config or get_config()
        return cls.from_settings(config.settings, config.brand_kit)

    # ===================
    # 渲染
    # ===================

    @property
    def surface(self) -> Image.Image:
        """最新的渲染结果."""
        if self._surface is None:
            self.render()
        return self._surface

    @property
    def render_count(self) -> int:
        """已执行的渲染次数."""
        return self._render_count

    def render(self) -> Image.Image:
        """重新渲染画面."""
        self._surface = self._renderer.render(
            self.store.layers,
            self.canvas,
            self.store.selected_id,
        )
        self._render_count += 1
        return self._surface

    # ===================
    # 画布
    # ===================

    def apply_preset(self, name: str) -> None:
        """切换画布预设，保留已有图层.

        Raises:
            KeyError: 未知预设
        """
        preset = get_preset(name)
        self.canvas.width = preset.width
        self.canvas.height = preset.height
        self.canvas.preset_name = preset.name
        logger.info(f"切换画布预设: {preset.name} ({preset.width}x{preset.height})")
        self.render()

    def resize_canvas(self, width: int, height: int) -> None:
        """自定义画布尺寸，保留已有图层."""
        self.canvas.width = width
        self.canvas.height = height
        self.canvas.preset_name = None
        logger.info(f"调整画布尺寸: {width}x{height}")
        self.render()

    def set_background(self, color: str) -> None:
        """设置画布背景色."""
        self.canvas.background_color = color
        self.render()

    # ===================
    # 图层
    # ===================

    @property
    def layers(self) -> list[Layer]:
        return self.store.layers

    @property
    def selected_id(self) -> Optional[str]:
        return self.store.selected_id

    def _next_number(self) -> int:
        return len(self.store) + 1

    def _add_and_select(self, layer: Layer) -> str:
        layer_id = self.store.add(layer)
        self.store.select(layer_id)
        return layer_id

    def add_text_layer(self, text: Optional[str] = None, **kwargs: Any) -> str:
        """添加文字图层并选中，默认使用品牌套件的首个字体和颜色."""
        if text is not None:
            kwargs["text"] = text
        if self.brand_kit.fonts:
            kwargs.setdefault("font_family", self.brand_kit.fonts[0])
        if self.brand_kit.colors:
            kwargs.setdefault("color", self.brand_kit.colors[0])
        return self._add_and_select(
            create_text_layer(self.canvas, number=self._next_number(), **kwargs)
        )

    def add_shape_layer(self, shape_kind: ShapeKind | str, **kwargs: Any) -> str:
        """添加形状图层并选中."""
        if self.brand_kit.colors:
            kwargs.setdefault("fill", self.brand_kit.colors[0])
        return self._add_and_select(
            create_shape_layer(
                self.canvas, shape_kind, number=self._next_number(), **kwargs
            )
        )

    def add_image_layer(self, data: bytes, name: Optional[str] = None) -> str:
        """上传图片为新图层并选中.

        Raises:
            ImageDecodeError: 图片无法解码，此时文档不变
        """
        layer = create_image_layer(
            self.canvas, data, number=self._next_number(), name=name
        )
        return self._add_and_select(layer)

    def add_brand_asset(self, asset: BrandAsset | str) -> Optional[str]:
        """把品牌素材放到画布上并选中.

        Args:
            asset: 素材或素材ID

        Returns:
            新图层ID，素材ID不存在返回 None

        Raises:
            ImageDecodeError: 素材无法加载
        """
        if isinstance(asset, str):
            found = self.brand_kit.get_asset(asset)
            if found is None:
                logger.warning(f"品牌素材不存在: {asset}")
                return None
            asset = found
        return self._add_and_select(create_asset_layer(self.canvas, asset))

    def upload_brand_asset(
        self,
        data: bytes,
        name: str,
        asset_type: AssetType = AssetType.LOGO,
    ) -> BrandAsset:
        """上传图片到品牌套件（不会放到画布上）.

        Raises:
            ImageDecodeError: 图片无法解码
        """
        _, _, mime_type = probe_image(data)
        asset = BrandAsset(name=name, type=asset_type, src=encode_data_url(data, mime_type))
        self.brand_kit.add_asset(asset)
        logger.info(f"上传品牌素材: {name}")
        return asset

    def update_layer(self, layer_id: str, **fields: Any) -> None:
        self.store.update(layer_id, **fields)

    def delete_layer(self, layer_id: str) -> None:
        self.store.delete(layer_id)

    def duplicate_layer(self, layer_id: str) -> Optional[str]:
        return self.store.duplicate(layer_id)

    def move_layer(self, layer_id: str, direction: Direction | str) -> None:
        self.store.reorder(layer_id, direction)

    def select(self, layer_id: Optional[str]) -> None:
        self.store.select(layer_id)

    # ===================
    # 交互
    # ===================

    def hit_test(
        self,
        point: tuple[float, float],
        respect_rotation: bool = False,
    ) -> Optional[str]:
        """返回点击位置的顶层可交互图层ID."""
        return hit_test(self.store.layers, point, respect_rotation)

    def click(
        self,
        point: tuple[float, float],
        respect_rotation: bool = False,
    ) -> Optional[str]:
        """点击画布：选中命中的图层，未命中则清除选中."""
        layer_id = self.hit_test(point, respect_rotation)
        self.store.select(layer_id)
        return layer_id

    # ===================
    # 快照与导出
    # ===================

    def snapshot(self) -> VersionEntry:
        """保存当前画面的版本快照."""
        return self.versions.snapshot(self.surface)

    def export(
        self,
        format: ExportFormat | str = ExportFormat.PNG,
        quality: Optional[float] = None,
    ) -> bytes:
        """导出当前画面.

        Raises:
            ExportError: 格式不支持或编码失败
        """
        return self._exporter.export(self.surface, format, quality, self._background_rgb())

    def export_to_file(
        self,
        path: str | Path,
        format: ExportFormat | str | None = None,
        quality: Optional[float] = None,
    ) -> Path:
        """导出当前画面到文件."""
        return self._exporter.export_to_file(
            self.surface, path, format, quality, self._background_rgb()
        )

    def _background_rgb(self) -> tuple[int, int, int]:
        r, g, b, a = parse_color(self.canvas.background_color)
        # 透明背景导出为 JPEG 时使用白色
        return (r, g, b) if a else (255, 255, 255)
