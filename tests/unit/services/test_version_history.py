"""版本快照服务单元测试."""

from __future__ import annotations

import io

from PIL import Image

from brand_studio.services.version_history import VersionHistory


class TestVersionHistory:
    """测试版本快照."""

    def test_snapshot_thumbnail(self) -> None:
        history = VersionHistory(thumbnail_max_size=100)
        entry = history.snapshot(Image.new("RGBA", (1080, 540), (0, 128, 255, 255)))

        thumb = Image.open(io.BytesIO(entry.thumbnail))
        assert thumb.format == "JPEG"
        assert thumb.size == (100, 50)
        assert (entry.width, entry.height) == (100, 50)
        assert entry.description == "Version 1"

    def test_newest_first(self) -> None:
        history = VersionHistory()
        surface = Image.new("RGBA", (64, 64), (255, 255, 255, 255))
        entries = [history.snapshot(surface) for _ in range(3)]

        listed = history.list()
        assert [e.id for e in listed] == [e.id for e in reversed(entries)]
        assert history.latest is entries[-1]
        assert len(history) == 3

    def test_list_is_a_copy(self) -> None:
        history = VersionHistory()
        history.snapshot(Image.new("RGBA", (8, 8)))
        history.list().clear()
        assert len(history) == 1

    def test_empty(self) -> None:
        history = VersionHistory()
        assert history.latest is None
        assert history.list() == []
