"""图层变换单元测试."""

from __future__ import annotations

import pytest

from brand_studio.core.transform import Transform


class TestTransformProperties:
    """测试变换的派生属性."""

    @pytest.mark.parametrize(
        "rotation,expected",
        [(0, 0), (45, 45), (360, 0), (370, 10), (-90, 270), (-720, 0)],
    )
    def test_normalized_rotation(self, rotation: float, expected: float) -> None:
        """测试旋转角度归一化到 [0, 360)."""
        assert Transform(0, 0, 10, 10, rotation=rotation).normalized_rotation == pytest.approx(
            expected
        )

    @pytest.mark.parametrize("opacity,expected", [(-0.5, 0), (0.3, 0.3), (1.5, 1)])
    def test_effective_opacity(self, opacity: float, expected: float) -> None:
        """测试不透明度限制到 [0, 1]."""
        assert Transform(0, 0, 10, 10, opacity=opacity).effective_opacity == expected

    def test_center(self) -> None:
        assert Transform(100, 100, 200, 100).center == (200, 150)


class TestTransformMapping:
    """测试坐标映射."""

    def test_identity(self) -> None:
        """测试未旋转时局部坐标只是平移."""
        t = Transform(10, 20, 100, 50)
        assert t.to_document((0, 0)) == pytest.approx((10, 20))
        assert t.to_document((100, 50)) == pytest.approx((110, 70))

    def test_rotation_is_clockwise_around_center(self) -> None:
        """测试旋转围绕中心顺时针进行（Y 轴向下）."""
        t = Transform(0, 0, 100, 100, rotation=90)
        # 左上角顺时针旋转 90 度后到右上角
        assert t.to_document((0, 0)) == pytest.approx((100, 0))
        assert t.to_document((50, 50)) == pytest.approx((50, 50))

    def test_to_local_inverts_to_document(self) -> None:
        t = Transform(30, 40, 120, 60, rotation=33)
        point = (17.0, 25.0)
        assert t.to_local(t.to_document(point)) == pytest.approx(point)

    def test_rotated_bounds(self) -> None:
        """测试旋转 90 度后外接矩形宽高互换."""
        t = Transform(0, 0, 200, 20, rotation=90)
        left, top, right, bottom = t.rotated_bounds()
        assert (right - left, bottom - top) == pytest.approx((20, 200))
        assert ((left + right) / 2, (top + bottom) / 2) == pytest.approx(t.center)


class TestTransformContains:
    """测试点包含判断."""

    def test_bounds_inclusive(self) -> None:
        t = Transform(100, 100, 200, 200)
        assert t.contains((100, 100))
        assert t.contains((300, 300))
        assert not t.contains((99.9, 150))

    def test_rotation_ignored_by_default(self) -> None:
        """测试默认按未旋转的边界框判断."""
        t = Transform(0, 100, 200, 20, rotation=90)
        assert t.contains((10, 110))
        assert not t.contains((100, 20))

    def test_respect_rotation(self) -> None:
        """测试开启旋转感知后的判断."""
        t = Transform(0, 100, 200, 20, rotation=90)
        assert not t.contains((10, 110), respect_rotation=True)
        assert t.contains((100, 20), respect_rotation=True)
