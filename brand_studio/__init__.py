"""Brand Studio 图层合成引擎."""

from brand_studio.utils.constants import APP_NAME, APP_VERSION

__version__ = APP_VERSION

__all__ = ["APP_NAME", "APP_VERSION", "__version__"]
