"""版本快照模型."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from brand_studio.utils.helpers import generate_short_id


class VersionEntry(BaseModel):
    """版本快照条目.

    只记录渲染结果的缩略图，不能用于恢复文档。

    Attributes:
        id: 快照ID
        timestamp: 创建时间
        thumbnail: JPEG 缩略图字节
        description: 描述（"Version N"）
        width: 缩略图宽度
        height: 缩略图高度
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_short_id)
    timestamp: datetime = Field(default_factory=datetime.now)
    thumbnail: bytes
    description: str
    width: int = Field(ge=1)
    height: int = Field(ge=1)
