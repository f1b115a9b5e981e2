"""导出服务.

把渲染结果编码为 PNG（无损）或 JPEG（有损）。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from brand_studio.utils.constants import DEFAULT_EXPORT_QUALITY, EXPORT_FILENAME_STEM
from brand_studio.utils.exceptions import ExportError
from brand_studio.utils.helpers import clamp
from brand_studio.utils.image_utils import image_to_bytes
from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)


class ExportFormat(str, Enum):
    """导出格式."""

    PNG = "png"  # 无损
    JPEG = "jpeg"  # 有损

    @property
    def pil_format(self) -> str:
        return self.value.upper()

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "ExportFormat | str") -> "ExportFormat":
        """解析格式名称，接受 png/jpeg/jpg 及 MIME 类型.

        Raises:
            ExportError: 不支持的格式
        """
        if isinstance(value, ExportFormat):
            return value
        name = str(value).lower().strip().removeprefix("image/").lstrip(".")
        if name == "jpg":
            name = "jpeg"
        try:
            return cls(name)
        except ValueError:
            raise ExportError(f"不支持的导出格式: {value}")


class Exporter:
    """画面导出器."""

    def __init__(
        self,
        default_quality: float = DEFAULT_EXPORT_QUALITY,
        background: Tuple[int, int, int] = (255, 255, 255),
    ) -> None:
        """初始化导出器.

        Args:
            default_quality: 默认质量 (0-1)，只影响有损格式
            background: JPEG 透明区域的底色
        """
        self._default_quality = default_quality
        self._background = background

    def export(
        self,
        surface: Image.Image,
        format: ExportFormat | str = ExportFormat.PNG,
        quality: Optional[float] = None,
        background: Optional[Tuple[int, int, int]] = None,
    ) -> bytes:
        """编码画面.

        Args:
            surface: 渲染结果
            format: 导出格式
            quality: 质量 (0-1)，超出范围会被截断
            background: JPEG 透明区域的底色，默认使用导出器的底色

        Returns:
            编码后的字节数据

        Raises:
            ExportError: 格式不支持或编码失败
        """
        export_format = ExportFormat.parse(format)
        q = clamp(self._default_quality if quality is None else quality, 0.0, 1.0)

        try:
            data = image_to_bytes(
                surface,
                format=export_format.pil_format,
                quality=max(1, round(q * 100)),
                background=background or self._background,
            )
        except (OSError, ValueError) as e:
            logger.error(f"导出失败: {e}")
            raise ExportError(f"导出失败: {e}")

        logger.info(f"导出完成: format={export_format.value}, size={len(data)} bytes")
        return data

    def export_to_file(
        self,
        surface: Image.Image,
        path: str | Path,
        format: ExportFormat | str | None = None,
        quality: Optional[float] = None,
        background: Optional[Tuple[int, int, int]] = None,
    ) -> Path:
        """导出到文件.

        未指定格式时按文件扩展名推断。

        Raises:
            ExportError: 格式不支持或写入失败
        """
        path = Path(path)
        export_format = ExportFormat.parse(format or path.suffix or ExportFormat.PNG)
        data = self.export(surface, export_format, quality, background)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"写入导出文件失败: {path}, 错误: {e}")
            raise ExportError(f"写入导出文件失败: {e}")

        logger.info(f"已导出到文件: {path}")
        return path


def suggested_filename(format: ExportFormat | str = ExportFormat.PNG) -> str:
    """返回建议的导出文件名."""
    return f"{EXPORT_FILENAME_STEM}.{ExportFormat.parse(format).extension}"
