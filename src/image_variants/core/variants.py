"""Variant catalog and deterministic key derivation."""

import posixpath
from typing import Dict, Iterable, Tuple

from .exceptions import ConfigurationError
from .models import VariantSpec

VARIANT_CATALOG: Tuple[VariantSpec, ...] = (
    VariantSpec(name="default"),
    VariantSpec(name="sd_320x180", max_width=320, max_height=180),
    VariantSpec(name="hd_1280x720", max_width=1280, max_height=720),
    VariantSpec(name="fhd_1920x1080", max_width=1920, max_height=1080),
)

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"})

CONTENT_TYPES: Dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def split_key(key: str) -> Tuple[str, str, str]:
    """
    Split an S3 key into (parent, base name, extension).

    Args:
        key: Storage-relative object key, e.g. "a/b/photo.jpg"

    Returns:
        Tuple such as ("a/b", "photo", ".jpg"). Parent is "" for root keys.
    """
    parent, filename = posixpath.split(key)
    base, extension = posixpath.splitext(filename)
    return parent, base, extension


def derive_variant_key(source_key: str, variant_name: str) -> str:
    """
    Calculate the destination key of one variant of a source image.

    The parent path is kept as-is and the original extension is re-appended,
    so "a/b/photo.jpg" + "hd_1280x720" gives "a/b/photo-hd_1280x720.jpg".
    """
    parent, base, extension = split_key(source_key)
    filename = f"{base}-{variant_name}{extension}"
    if parent:
        return f"{parent}/{filename}"
    return filename


def content_type_for(key: str) -> str:
    """Map a key's extension to a MIME type; unknown types are binary."""
    extension = posixpath.splitext(key)[1].lower()
    return CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)


def is_image_key(key: str) -> bool:
    if key.endswith("/"):
        return False
    return posixpath.splitext(key)[1].lower() in IMAGE_EXTENSIONS


def validate_catalog(catalog: Iterable[VariantSpec]) -> Tuple[VariantSpec, ...]:
    """Freeze a catalog into a tuple, rejecting duplicate variant names."""
    variants = tuple(catalog)
    names = [variant.name for variant in variants]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate variant names: {', '.join(duplicates)}")
    if not variants:
        raise ConfigurationError("Variant catalog is empty")
    return variants


def is_derived_key(key: str, catalog: Iterable[VariantSpec] = VARIANT_CATALOG) -> bool:
    """True when the key already looks like an output of one of the variants."""
    _, base, _ = split_key(key)
    return any(base.endswith(f"-{variant.name}") for variant in catalog)
