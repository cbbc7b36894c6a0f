"""Core utilities and shared components for the image variants pipeline."""

from .logging_config import enable_debug_logging, get_logger, setup_logger
from .exceptions import (
    ImageVariantsError,
    ConfigurationError,
    CredentialsError,
    S3Error,
    DiscoveryError,
    FetchError,
    PublishError,
    ImageProcessingError,
    StagingError,
    TranscodeError,
)
from .models import (
    ObjectOutcome,
    ProcessedVariant,
    RunConfig,
    RunSummary,
    SourceObject,
    VariantFailure,
    VariantSpec,
)
from .variants import (
    VARIANT_CATALOG,
    content_type_for,
    derive_variant_key,
    is_image_key,
)

__all__ = [
    "VariantSpec",
    "SourceObject",
    "ProcessedVariant",
    "VariantFailure",
    "ObjectOutcome",
    "RunConfig",
    "RunSummary",
    "VARIANT_CATALOG",
    "derive_variant_key",
    "content_type_for",
    "is_image_key",
    "setup_logger",
    "get_logger",
    "enable_debug_logging",
    "ImageVariantsError",
    "ConfigurationError",
    "CredentialsError",
    "S3Error",
    "DiscoveryError",
    "FetchError",
    "PublishError",
    "ImageProcessingError",
    "StagingError",
    "TranscodeError",
]
