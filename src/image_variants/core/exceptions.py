"""Custom exceptions for the image variants pipeline."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Type

from botocore.exceptions import BotoCoreError, ClientError


class ImageVariantsError(Exception):
    """Base exception for all image variants pipeline errors."""


class ConfigurationError(ImageVariantsError):
    """Error raised for invalid configuration options."""


class CredentialsError(ConfigurationError):
    """Error raised when no AWS credentials can be resolved."""


class S3Error(ImageVariantsError):
    """Error raised for S3 related failures."""


class DiscoveryError(S3Error):
    """Listing the source prefix failed. Fatal to the whole run."""


class FetchError(S3Error):
    """Downloading a source object failed. Aborts that object only."""


class PublishError(S3Error):
    """Uploading a derived object failed. Aborts that variant only."""


class StagingError(ImageVariantsError):
    """Writing or reading the local copy of a source object failed."""


class ImageProcessingError(ImageVariantsError):
    """Error raised when decoding or encoding an image fails."""


class TranscodeError(ImageProcessingError):
    """Error raised when producing one variant of one image fails."""

    def __init__(self, message: str, variant_name: str = "", source_key: str = ""):
        super().__init__(message)
        self.variant_name = variant_name
        self.source_key = source_key


@contextmanager
def wrap_s3_errors(error_cls: Type[S3Error], action: str) -> Iterator[None]:
    """Re-raise botocore failures inside the block as ``error_cls``."""
    try:
        yield
    except (ClientError, BotoCoreError) as exc:
        raise error_cls(f"{action} failed: {exc}") from exc


def describe_error(exc: BaseException) -> str:
    """Short ``Type: message`` string stored in outcome records."""
    return f"{type(exc).__name__}: {exc}"
