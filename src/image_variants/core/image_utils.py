"""Image processing utilities for the image variants pipeline."""

import io
import posixpath
from typing import Dict, Optional, Tuple

from PIL import Image

EXTENSION_FORMATS: Dict[str, str] = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
    ".bmp": "BMP",
    ".webp": "WEBP",
}

# Modes Pillow can write as JPEG without conversion
JPEG_MODES = ("RGB", "L", "CMYK")

DEFAULT_QUALITY = 95


def load_image(image_bytes: bytes) -> "Image.Image":
    """
    Decode image bytes into a fully loaded PIL Image.

    Raises:
        PIL.UnidentifiedImageError: If the bytes are not a readable image
        OSError: If the image data is truncated or corrupt
    """
    image = Image.open(io.BytesIO(image_bytes))
    image.load()
    return image


def image_dimensions(image_bytes: bytes) -> Tuple[int, int]:
    """Return (width, height) of encoded image bytes."""
    with Image.open(io.BytesIO(image_bytes)) as image:
        return image.size


def output_format_for(key: str, fallback: Optional[str] = None) -> str:
    """
    Pick the Pillow format used to write a key, based on its extension.

    Args:
        key: Object key whose extension decides the format
        fallback: Format to use for unknown extensions (e.g. the decoded format)

    Returns:
        Pillow format name such as "JPEG" or "PNG"
    """
    extension = posixpath.splitext(key)[1].lower()
    return EXTENSION_FORMATS.get(extension) or fallback or "PNG"


def resize_to_fit(img: "Image.Image", max_width: int, max_height: int) -> "Image.Image":
    """
    Shrink an image to fit inside a bounding box, keeping its aspect ratio.

    Images already inside the box are returned at their original size.
    """
    resized = img.copy()
    resized.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
    return resized


def encode_image(img: "Image.Image", format_type: str) -> bytes:
    """Encode a PIL image to bytes in the given Pillow format."""
    output = io.BytesIO()

    if format_type == "JPEG":
        if img.mode not in JPEG_MODES:
            img = img.convert("RGB")
        img.save(output, format="JPEG", quality=DEFAULT_QUALITY)
    elif format_type == "WEBP":
        img.save(output, format="WEBP", quality=DEFAULT_QUALITY)
    else:
        img.save(output, format=format_type)

    return output.getvalue()
