"""字体查找.

按字体名称、字重和字形在系统字体目录中查找 TrueType 字体，
找不到时回退到 Pillow 内置字体。
"""

from __future__ import annotations

import functools
import os
from typing import Union

from PIL import ImageFont

from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

AnyFont = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# 字体搜索路径
FONT_SEARCH_PATHS = [
    "/System/Library/Fonts/",
    "/System/Library/Fonts/Supplemental/",
    "/Library/Fonts/",
    "~/Library/Fonts/",
    "C:/Windows/Fonts/",
    "/usr/share/fonts/",
    "/usr/share/fonts/truetype/",
    "/usr/share/fonts/truetype/dejavu/",
    "~/.fonts/",
]

# 未找到指定字体时依次尝试
FALLBACK_FONTS = ["Arial", "Helvetica", "DejaVuSans", "LiberationSans-Regular"]


def _font_variants(font_family: str, bold: bool, italic: bool) -> list[str]:
    """生成字体文件名候选列表."""
    compact = font_family.replace(" ", "")
    names = []
    if bold and italic:
        suffixes = ["-BoldItalic", " Bold Italic", "bi"]
    elif bold:
        suffixes = ["-Bold", " Bold", "bd"]
    elif italic:
        suffixes = ["-Italic", " Italic", "i"]
    else:
        suffixes = ["-Regular", " Regular", ""]

    for base in dict.fromkeys([font_family, compact]):
        for suffix in suffixes:
            for ext in (".ttf", ".otf", ".ttc"):
                names.append(f"{base}{suffix}{ext}")
    # 样式变体找不到时退回常规字体
    if bold or italic:
        for base in dict.fromkeys([font_family, compact]):
            for ext in (".ttf", ".otf", ".ttc"):
                names.append(f"{base}{ext}")
    return names


def _search_font(filenames: list[str], size: int) -> ImageFont.FreeTypeFont | None:
    for search_path in FONT_SEARCH_PATHS:
        expanded_path = os.path.expanduser(search_path)
        if not os.path.isdir(expanded_path):
            continue
        for filename in filenames:
            font_path = os.path.join(expanded_path, filename)
            if os.path.exists(font_path):
                try:
                    return ImageFont.truetype(font_path, size)
                except OSError:
                    continue
    return None


@functools.lru_cache(maxsize=64)
def find_font(
    font_family: str,
    size: int,
    bold: bool = False,
    italic: bool = False,
) -> AnyFont:
    """查找字体.

    Args:
        font_family: 字体名称
        size: 字号（像素）
        bold: 是否粗体
        italic: 是否斜体

    Returns:
        ImageFont 对象
    """
    size = max(1, size)

    if font_family:
        # 字体名称本身可能就是可直接加载的路径
        try:
            return ImageFont.truetype(font_family, size)
        except OSError:
            pass

        font = _search_font(_font_variants(font_family, bold, italic), size)
        if font is not None:
            return font

    for fallback in FALLBACK_FONTS:
        font = _search_font(_font_variants(fallback, bold, italic), size)
        if font is not None:
            logger.debug(f"字体 '{font_family}' 未找到，回退到 {fallback}")
            return font

    logger.warning(f"字体 '{font_family}' 未找到，使用内置字体")
    return ImageFont.load_default(size=size)
