"""图片工具函数单元测试."""

from __future__ import annotations

import io

import pytest
from PIL import Image, ImageDraw

from brand_studio.utils.exceptions import ImageDecodeError
from brand_studio.utils.image_utils import (
    bytes_to_image,
    decode_data_url,
    draw_dashed_rectangle,
    encode_data_url,
    fit_within,
    image_to_bytes,
    load_image_source,
    probe_image,
)


# ===================
# data URL
# ===================
class TestDataUrl:
    """测试 data URL 编解码."""

    def test_encode_decode(self, png_bytes: bytes) -> None:
        src = encode_data_url(png_bytes)
        assert src.startswith("data:image/png;base64,")
        assert decode_data_url(src) == png_bytes

    @pytest.mark.parametrize(
        "src",
        ["data:image/png,plain", "data:image/png;base64,@@@", "no comma here"],
    )
    def test_invalid(self, src: str) -> None:
        with pytest.raises(ImageDecodeError):
            decode_data_url(src)


# ===================
# 解码与探测
# ===================
class TestDecode:
    """测试图片解码."""

    def test_probe_png(self, make_png) -> None:
        assert probe_image(make_png(size=(30, 20))) == (30, 20, "image/png")

    def test_probe_jpeg(self, make_png) -> None:
        assert probe_image(make_png(format="JPEG"))[2] == "image/jpeg"

    @pytest.mark.parametrize("data", [b"", b"hello", b"\x89PNG\r\n\x1a\n"])
    def test_invalid_bytes(self, data: bytes) -> None:
        with pytest.raises(ImageDecodeError):
            bytes_to_image(data)

    def test_load_from_data_url(self, make_png) -> None:
        image = load_image_source(encode_data_url(make_png(format="JPEG"), "image/jpeg"))
        assert image.mode == "RGBA"

    def test_load_from_file(self, make_png, tmp_path) -> None:
        path = tmp_path / "a.png"
        path.write_bytes(make_png(size=(5, 6)))
        assert load_image_source(str(path)).size == (5, 6)

    def test_load_missing_file(self, tmp_path) -> None:
        with pytest.raises(ImageDecodeError):
            load_image_source(str(tmp_path / "missing.png"))


# ===================
# 尺寸与编码
# ===================
class TestSizingAndEncoding:
    """测试尺寸计算和编码输出."""

    def test_fit_within_scales_long_side(self) -> None:
        assert fit_within(2000, 1000, 500) == pytest.approx((500, 250))
        assert fit_within(300, 600, 300) == pytest.approx((150, 300))

    def test_fit_within_keeps_small(self) -> None:
        assert fit_within(100, 50, 500) == (100, 50)

    def test_jpeg_flattens_transparency(self) -> None:
        image = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        data = image_to_bytes(image, "jpeg", background=(255, 255, 255))
        result = Image.open(io.BytesIO(data))
        assert result.mode == "RGB"
        assert min(result.getpixel((5, 5))) > 245

    def test_png_keeps_mode(self) -> None:
        image = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        result = Image.open(io.BytesIO(image_to_bytes(image, "PNG")))
        assert result.mode == "RGBA"

    def test_dashed_rectangle(self) -> None:
        image = Image.new("RGBA", (40, 40), (0, 0, 0, 0))
        draw_dashed_rectangle(
            ImageDraw.Draw(image), (5, 5, 35, 35), (255, 0, 0, 255), dash_length=4, gap_length=4
        )
        # 虚线段与间隔
        assert image.getpixel((6, 5)) == (255, 0, 0, 255)
        assert image.getpixel((11, 5)) == (0, 0, 0, 0)
        # 内部不填充
        assert image.getpixel((20, 20)) == (0, 0, 0, 0)
