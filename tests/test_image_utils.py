"""Tests for image_utils.py helpers."""

import io

import pytest
from PIL import Image, UnidentifiedImageError

from image_variants.core.image_utils import (
    encode_image,
    image_dimensions,
    load_image,
    output_format_for,
    resize_to_fit,
)
from image_variants.testing.fakes import create_test_image


class TestLoadImage:
    """Tests for load_image and image_dimensions."""

    def test_load_image(self):
        """Test bytes decode into a loaded image."""
        image = load_image(create_test_image(120, 80))
        assert image.size == (120, 80)
        assert image.format == "JPEG"

    def test_load_image_rejects_garbage(self):
        """Test non-image bytes raise Pillow's error."""
        with pytest.raises(UnidentifiedImageError):
            load_image(b"not an image")

    def test_image_dimensions(self):
        """Test dimensions are read from encoded bytes."""
        assert image_dimensions(create_test_image(64, 32, "PNG")) == (64, 32)


class TestResizeToFit:
    """Tests for resize_to_fit."""

    def test_small_image_not_enlarged(self):
        """Test an image inside the box keeps its size."""
        image = Image.new("RGB", (100, 50))
        assert resize_to_fit(image, 1920, 1080).size == (100, 50)

    def test_wide_image_limited_by_width(self):
        """Test a 2:1 image shrinks to the box width."""
        image = Image.new("RGB", (4000, 2000))
        assert resize_to_fit(image, 1280, 720).size == (1280, 640)

    def test_tall_image_limited_by_height(self):
        """Test a portrait image shrinks to the box height."""
        image = Image.new("RGB", (1000, 2000))
        width, height = resize_to_fit(image, 320, 180).size
        assert height == 180
        assert width == 90

    def test_source_image_untouched(self):
        """Test the input image is not modified."""
        image = Image.new("RGB", (400, 400))
        resize_to_fit(image, 100, 100)
        assert image.size == (400, 400)


class TestOutputFormat:
    """Tests for output_format_for."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("a.jpg", "JPEG"),
            ("a.JPEG", "JPEG"),
            ("a.png", "PNG"),
            ("a.gif", "GIF"),
            ("a.bmp", "BMP"),
            ("a.webp", "WEBP"),
        ],
    )
    def test_known_extensions(self, key, expected):
        """Test extensions map to Pillow formats."""
        assert output_format_for(key) == expected

    def test_unknown_extension_uses_fallback(self):
        """Test the decoded format is used for unknown extensions."""
        assert output_format_for("a.xyz", "GIF") == "GIF"
        assert output_format_for("a.xyz") == "PNG"


class TestEncodeImage:
    """Tests for encode_image."""

    @pytest.mark.parametrize("format_type", ["JPEG", "PNG", "GIF", "BMP", "WEBP"])
    def test_encodes_in_requested_format(self, format_type):
        """Test the output decodes back in the requested format."""
        data = encode_image(Image.new("RGB", (40, 30), "blue"), format_type)
        with Image.open(io.BytesIO(data)) as decoded:
            assert decoded.format == format_type
            assert decoded.size == (40, 30)

    def test_jpeg_converts_alpha(self):
        """Test RGBA images can still be written as JPEG."""
        data = encode_image(Image.new("RGBA", (20, 20), (255, 0, 0, 128)), "JPEG")
        with Image.open(io.BytesIO(data)) as decoded:
            assert decoded.mode == "RGB"
