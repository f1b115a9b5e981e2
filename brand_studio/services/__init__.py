"""服务层模块."""

from brand_studio.services.exporter import Exporter, ExportFormat, suggested_filename
from brand_studio.services.generation_bridge import (
    AI_ITERATION_PRESETS,
    CompletionCallback,
    GenerationBridge,
    GenerationOperation,
    GenerationResult,
)
from brand_studio.services.version_history import VersionHistory

__all__ = [
    # 导出
    "ExportFormat",
    "Exporter",
    "suggested_filename",
    # AI 生成桥接
    "AI_ITERATION_PRESETS",
    "CompletionCallback",
    "GenerationBridge",
    "GenerationOperation",
    "GenerationResult",
    # 版本快照
    "VersionHistory",
]
