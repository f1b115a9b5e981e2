"""版本快照服务.

把当前渲染结果压缩成 JPEG 缩略图保存，最新的排在最前。
快照只用于预览，不能恢复文档。
"""

from __future__ import annotations

from typing import Iterator

from PIL import Image

from brand_studio.models.version import VersionEntry
from brand_studio.utils.constants import THUMBNAIL_QUALITY, THUMBNAIL_SIZE
from brand_studio.utils.helpers import clamp
from brand_studio.utils.image_utils import image_to_bytes
from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class VersionHistory:
    """版本快照列表.

    Example:
        >>> history = VersionHistory()
        >>> entry = history.snapshot(surface)
        >>> entry.description
        'Version 1'
    """

    def __init__(
        self,
        thumbnail_quality: float = THUMBNAIL_QUALITY,
        thumbnail_max_size: int = THUMBNAIL_SIZE[0],
    ) -> None:
        """初始化版本快照列表.

        Args:
            thumbnail_quality: 缩略图 JPEG 质量 (0-1)
            thumbnail_max_size: 缩略图最大边长
        """
        self._quality = clamp(thumbnail_quality, 0.0, 1.0)
        self._max_size = thumbnail_max_size
        self._entries: list[VersionEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[VersionEntry]:
        return iter(list(self._entries))

    def snapshot(self, surface: Image.Image) -> VersionEntry:
        """保存当前画面的快照.

        Args:
            surface: 渲染结果

        Returns:
            新的快照条目（已插入到列表最前）
        """
        thumb = surface.copy()
        thumb.thumbnail((self._max_size, self._max_size), Image.Resampling.LANCZOS)

        entry = VersionEntry(
            thumbnail=image_to_bytes(
                thumb,
                format="JPEG",
                quality=max(1, round(self._quality * 100)),
            ),
            description=f"Version {len(self._entries) + 1}",
            width=thumb.width,
            height=thumb.height,
        )
        self._entries.insert(0, entry)
        logger.info(f"保存版本快照: {entry.description}")
        return entry

    def list(self) -> list[VersionEntry]:
        """返回所有快照（最新在前）."""
        return list(self._entries)

    @property
    def latest(self) -> VersionEntry | None:
        """最新的快照."""
        return self._entries[0] if self._entries else None

    def clear(self) -> None:
        """清空快照."""
        self._entries.clear()
