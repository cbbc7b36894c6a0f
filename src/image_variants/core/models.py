"""Shared data models for the image variants pipeline."""

import posixpath
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator

DEFAULT_REGION = "us-east-1"


class VariantSpec(BaseModel):
    """One named output size. No bounding box means the original size."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    max_width: Optional[PositiveInt] = None
    max_height: Optional[PositiveInt] = None

    @model_validator(mode="after")
    def _both_or_neither(self) -> "VariantSpec":
        if (self.max_width is None) != (self.max_height is None):
            raise ValueError(
                f"variant {self.name!r} needs both max_width and max_height or neither"
            )
        return self

    @property
    def is_passthrough(self) -> bool:
        return self.max_width is None

    @property
    def bounding_box(self) -> Optional[Tuple[int, int]]:
        if self.max_width is None or self.max_height is None:
            return None
        return (self.max_width, self.max_height)


class SourceObject(BaseModel):
    """An image object discovered under the source prefix."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    size_bytes: int = 0

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.key)[1]


class ProcessedVariant(BaseModel):
    """A variant that was encoded and published successfully."""

    variant_name: str
    derived_key: str
    location: str
    content_type: str = "application/octet-stream"
    size_bytes: int = 0


class VariantFailure(BaseModel):
    """A variant that failed while reading its staged copy, transcoding or publishing."""

    variant_name: str
    stage: str
    error: str = ""


class ObjectOutcome(BaseModel):
    """Result of processing a single source object through every variant."""

    source_key: str
    variants: List[ProcessedVariant] = Field(default_factory=list)
    failures: List[VariantFailure] = Field(default_factory=list)
    fetch_error: str = ""
    processing_time: float = 0.0

    @property
    def published_count(self) -> int:
        return len(self.variants)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def has_failures(self) -> bool:
        return bool(self.fetch_error or self.failures)


class RunConfig(BaseModel):
    """Immutable configuration for one pipeline run."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    prefix: str = ""
    public: bool = True
    region: str = DEFAULT_REGION
    endpoint_url: Optional[str] = None
    skip_derived: bool = True
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)
    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=60.0, gt=0)
    staging_dir: Optional[str] = None
    debug: bool = False

    @field_validator("bucket")
    @classmethod
    def _bucket_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("bucket name is required")
        return value

    @field_validator("prefix")
    @classmethod
    def _normalise_prefix(cls, value: str) -> str:
        return value.strip().strip("/")

    @field_validator("region")
    @classmethod
    def _default_region(cls, value: str) -> str:
        return value.strip() or DEFAULT_REGION

    @property
    def list_prefix(self) -> str:
        """Prefix passed to ListObjectsV2; folder form when set."""
        return f"{self.prefix}/" if self.prefix else ""


class RunSummary(BaseModel):
    """Aggregated totals for a finished run."""

    objects_attempted: int = 0
    objects_with_failures: int = 0
    objects_failed_fetch: int = 0
    variants_published: int = 0
    variants_failed: int = 0
    outcomes: List[ObjectOutcome] = Field(default_factory=list)
