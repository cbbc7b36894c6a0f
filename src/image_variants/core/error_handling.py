# src/image_variants/core/error_handling.py

import functools
import logging
import time
from typing import Any, Callable, Dict, List, TypeVar

from botocore.exceptions import (
    ClientError,
    ConnectionError as BotocoreConnectionError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from .exceptions import S3Error
from .logging_config import DEFAULT_LOGGER_NAME

RETRYABLE_S3_ERROR_CODES = (
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "Throttling",
    "SlowDown",
    "RequestTimeout",
    "RequestTimeTooSkewed",
    "InternalError",
    "ServiceUnavailable",
)

RETRYABLE_CONNECTION_ERRORS = (
    BotocoreConnectionError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

F = TypeVar("F", bound=Callable[..., Any])


def is_retryable(error: S3Error) -> bool:
    """
    Decide whether a wrapped S3 failure is worth another attempt.

    Throttling codes, 5xx responses and connection/timeout errors are
    transient. Everything else (NoSuchKey, AccessDenied, ...) is not.
    """
    cause = error.__cause__
    if isinstance(cause, RETRYABLE_CONNECTION_ERRORS):
        return True
    if isinstance(cause, ClientError):
        code = cause.response.get("Error", {}).get("Code")
        if code in RETRYABLE_S3_ERROR_CODES:
            return True
        status = cause.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        return isinstance(status, int) and status >= 500
    return False


def retry_s3_operation(
    max_attempts: int = 3, initial_delay: float = 1.0, backoff_factor: float = 2.0
) -> Callable[[F], F]:
    """
    Decorator to retry S3 operations with exponential backoff.

    Only ``S3Error`` raised with a retryable cause is retried; the last
    error is re-raised once ``max_attempts`` is reached.
    """
    max_attempts = max(1, max_attempts)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = logging.getLogger(f"{DEFAULT_LOGGER_NAME}.retry")
            delay = initial_delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except S3Error as e:
                    if not is_retryable(e):
                        logger.debug(f"S3 operation '{func.__name__}' failed, not retryable: {e}")
                        raise
                    if attempt >= max_attempts:
                        logger.error(
                            f"S3 operation '{func.__name__}' failed after {max_attempts} attempts. Error: {e}"
                        )
                        raise
                    logger.warning(
                        f"S3 operation '{func.__name__}' failed. Attempt {attempt}/{max_attempts}. "
                        f"Retrying in {delay:.2f}s. Error: {e}"
                    )
                    time.sleep(delay)
                    delay *= backoff_factor

        return wrapper  # type: ignore[return-value]

    return decorator


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """

    def __init__(self, operation_name: str = "Batch Operation"):
        self.operation_name = operation_name
        self.errors: List[Dict[str, str]] = []
        self.logger = logging.getLogger(f"{DEFAULT_LOGGER_NAME}.batch")

    def __enter__(self) -> "BatchOperationContextManager":
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )
        elif self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.warning(
                    f"  Error {i + 1}/{len(self.errors)} for item "
                    f"'{error_detail['item']}': {error_detail['error']}"
                )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")

        # Never swallow the exception
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item") -> None:
        """
        Report an error for a specific item from within the 'with' block.

        Args:
            error_message: The error message or exception string.
            item_identifier: A string identifying the item that failed (e.g. the key).
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(
            f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}"
        )
