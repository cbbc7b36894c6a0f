"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Protocol

from .models import SourceObject, VariantSpec


class S3ClientProtocol(Protocol):
    """Subset of the boto3 S3 client used by the pipeline."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Put object to S3 (Bucket, Key, Body, ContentType and optional ACL)."""
        ...

    def get_paginator(self, operation_name: str) -> Any:
        """Get paginator for S3 operations."""
        ...


class TranscoderProtocol(Protocol):
    """Protocol for producing one variant of an encoded image."""

    def transform(self, image_bytes: bytes, spec: VariantSpec, source_key: str = "") -> bytes:
        """Return the encoded bytes of ``spec`` applied to ``image_bytes``."""
        ...


class LoggerProtocol(Protocol):
    """Anything with debug/info/warning/error taking an optional LogContext."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> None: ...


class ObjectEnumerator(ABC):
    """Abstract service for discovering source objects to process."""

    @abstractmethod
    def discover(self, bucket: str, prefix: str) -> List[SourceObject]:
        """Discover source objects under a prefix, in listing order."""
        ...
