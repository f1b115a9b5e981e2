"""配置管理器单元测试."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from brand_studio.core import config_manager as config_module
from brand_studio.core.config_manager import ConfigManager, get_config
from brand_studio.models.brand_kit import BrandKit
from brand_studio.utils.exceptions import ConfigError


@pytest.fixture
def kit_file(tmp_path: Path, monkeypatch) -> Path:
    """品牌套件文件指向临时目录."""
    path = tmp_path / "data" / "brand_kit.json"
    monkeypatch.setattr(config_module, "BRAND_KIT_FILE", path)
    return path


@pytest.fixture
def manager(kit_file: Path, tmp_path: Path, monkeypatch) -> Generator[ConfigManager, None, None]:
    """全新的配置管理器实例，测试后重置单例."""
    monkeypatch.chdir(tmp_path)
    for key in ("BRAND_STUDIO_LOG_LEVEL", "BRAND_STUDIO_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    ConfigManager._instance = None
    yield ConfigManager()
    ConfigManager._instance = None


class TestConfigManager:
    """测试配置管理器."""

    def test_singleton(self, manager: ConfigManager) -> None:
        assert ConfigManager() is manager
        assert get_config() is manager

    def test_default_brand_kit_when_missing(self, manager: ConfigManager) -> None:
        assert manager.brand_kit == BrandKit()

    def test_save_and_load(self, manager: ConfigManager, kit_file: Path) -> None:
        kit = BrandKit(name="Acme", colors=["#123456"], fonts=["Roboto"])
        manager.save_brand_kit(kit)

        assert kit_file.exists()
        manager.reload()
        loaded = manager.brand_kit
        assert loaded.name == "Acme"
        assert loaded.colors == ["#123456"]

    def test_invalid_file(self, manager: ConfigManager, kit_file: Path) -> None:
        kit_file.parent.mkdir(parents=True)
        kit_file.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            manager.load_brand_kit()

    def test_settings_from_env(self, manager: ConfigManager, monkeypatch) -> None:
        monkeypatch.setenv("BRAND_STUDIO_LOG_LEVEL", "debug")
        assert manager.settings.log_level == "DEBUG"

    def test_invalid_settings(self, manager: ConfigManager, monkeypatch) -> None:
        monkeypatch.setenv("BRAND_STUDIO_LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigError):
            _ = manager.settings

    def test_reset_to_defaults(self, manager: ConfigManager, kit_file: Path) -> None:
        manager.save_brand_kit(BrandKit(name="Acme"))
        manager.reset_to_defaults()
        assert not kit_file.exists()
        assert manager.brand_kit == BrandKit()


class TestDocumentFromConfig:
    """测试按配置管理器创建文档."""

    def test_uses_saved_brand_kit(self, manager: ConfigManager) -> None:
        from brand_studio.core.document import DocumentSession

        manager.save_brand_kit(BrandKit(name="Acme", colors=["#123456"], fonts=["Roboto"]))
        document = DocumentSession.from_config(manager)

        assert document.brand_kit.name == "Acme"
        assert document.brand_kit.colors == ["#123456"]
        layer_id = document.add_text_layer("Hi")
        assert document.store.get(layer_id).text.color == "#123456"

    def test_uses_settings_canvas(self, manager: ConfigManager, monkeypatch) -> None:
        from brand_studio.core.document import DocumentSession

        monkeypatch.setenv("BRAND_STUDIO_CANVAS_WIDTH", "640")
        monkeypatch.setenv("BRAND_STUDIO_CANVAS_HEIGHT", "480")
        document = DocumentSession.from_config()

        assert (document.canvas.width, document.canvas.height) == (640, 480)
        assert document.surface.size == (640, 480)
