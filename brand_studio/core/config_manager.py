"""配置管理器模块."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from brand_studio.models.app_settings import Settings
from brand_studio.models.brand_kit import BrandKit
from brand_studio.utils.constants import BRAND_KIT_FILE, LOG_DIR
from brand_studio.utils.exceptions import ConfigError
from brand_studio.utils.logger import configure_logging, setup_logger

logger = setup_logger(__name__)


class ConfigManager:
    """配置管理器.

    负责应用设置和品牌套件的加载、保存。

    Attributes:
        settings: 应用设置
        brand_kit: 品牌套件
    """

    _instance: Optional["ConfigManager"] = None

    def __new__(cls) -> "ConfigManager":
        """单例模式."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """初始化配置管理器."""
        if self._initialized:
            return

        self._settings: Optional[Settings] = None
        self._brand_kit: Optional[BrandKit] = None
        self._initialized = True

        logger.debug("配置管理器初始化完成")

    @property
    def settings(self) -> Settings:
        """获取应用设置."""
        if self._settings is None:
            self._settings = self._load_settings()
        return self._settings

    @property
    def brand_kit(self) -> BrandKit:
        """获取品牌套件."""
        if self._brand_kit is None:
            self._brand_kit = self.load_brand_kit()
        return self._brand_kit

    def _load_settings(self) -> Settings:
        """加载应用设置（环境变量和 .env 文件）.

        Raises:
            ConfigError: 设置无效
        """
        try:
            settings = Settings()
            logger.debug(f"应用设置加载完成: log_level={settings.log_level}")
            return settings
        except ValidationError as e:
            logger.error(f"加载应用设置失败: {e}")
            raise ConfigError(f"加载应用设置失败: {e}")

    def load_brand_kit(self) -> BrandKit:
        """加载品牌套件.

        文件不存在时返回默认套件。

        Raises:
            ConfigError: 文件内容无效
        """
        if not BRAND_KIT_FILE.exists():
            return BrandKit()

        try:
            kit = BrandKit.from_json(BRAND_KIT_FILE.read_text(encoding="utf-8"))
            logger.debug(f"从文件加载品牌套件: {kit.name}")
            return kit
        except (OSError, ValidationError) as e:
            logger.error(f"加载品牌套件失败: {e}")
            raise ConfigError(f"加载品牌套件失败: {e}")

    def save_brand_kit(self, kit: BrandKit) -> None:
        """保存品牌套件.

        Raises:
            ConfigError: 写入失败
        """
        try:
            BRAND_KIT_FILE.parent.mkdir(parents=True, exist_ok=True)
            BRAND_KIT_FILE.write_text(kit.to_json(), encoding="utf-8")
            self._brand_kit = kit
            logger.info("品牌套件已保存")
        except OSError as e:
            logger.error(f"保存品牌套件失败: {e}")
            raise ConfigError(f"保存品牌套件失败: {e}")

    def configure_logging(self) -> None:
        """按设置初始化日志."""
        settings = self.settings
        configure_logging(settings.log_level, LOG_DIR if settings.log_to_file else None)

    def reload(self) -> None:
        """重新加载所有配置."""
        self._settings = None
        self._brand_kit = None
        logger.info("配置已重新加载")

    def reset_to_defaults(self) -> None:
        """删除品牌套件文件并重新加载."""
        if BRAND_KIT_FILE.exists():
            BRAND_KIT_FILE.unlink()

        self.reload()
        logger.info("配置已重置为默认值")


def get_config() -> ConfigManager:
    """获取配置管理器实例.

    Returns:
        ConfigManager 单例实例
    """
    return ConfigManager()
