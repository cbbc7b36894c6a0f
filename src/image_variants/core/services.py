"""Service implementations for the image variants pipeline."""

import time
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Iterable, List, Optional, Sequence
from urllib.parse import quote

from PIL import Image

from .error_handling import BatchOperationContextManager, retry_s3_operation
from .exceptions import (
    DiscoveryError,
    FetchError,
    PublishError,
    StagingError,
    TranscodeError,
    describe_error,
    wrap_s3_errors,
)
from .image_utils import encode_image, load_image, output_format_for, resize_to_fit
from .models import (
    ObjectOutcome,
    ProcessedVariant,
    RunConfig,
    RunSummary,
    SourceObject,
    VariantFailure,
    VariantSpec,
)
from .observability import LogContext, MetricsCollector
from .protocols import LoggerProtocol, ObjectEnumerator, S3ClientProtocol, TranscoderProtocol
from .reporting import summarize_outcomes
from .staging import StagingArea
from .variants import (
    VARIANT_CATALOG,
    content_type_for,
    derive_variant_key,
    is_derived_key,
    is_image_key,
    validate_catalog,
)

PUBLIC_READ_ACL = "public-read"


def retry_policy_for(config: RunConfig) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Build the retry decorator used at the list/fetch/publish boundaries."""
    return retry_s3_operation(
        max_attempts=config.max_attempts,
        initial_delay=config.retry_delay,
        backoff_factor=config.backoff_factor,
    )


def object_location(config: RunConfig, key: str) -> str:
    """
    Externally addressable location of a published key.

    Public objects get an HTTPS URL (virtual-hosted S3 style, or path style
    under a custom endpoint). Private objects get an ``s3://`` locator.
    """
    if not config.public:
        return f"s3://{config.bucket}/{key}"
    quoted_key = quote(key, safe="/~")
    if config.endpoint_url:
        return f"{config.endpoint_url.rstrip('/')}/{config.bucket}/{quoted_key}"
    return f"https://{config.bucket}.s3.{config.region}.amazonaws.com/{quoted_key}"


class ImageTranscoderService:
    """Pillow-backed transcoder with fit-inside-without-enlargement resizing."""

    def transform(self, image_bytes: bytes, spec: VariantSpec, source_key: str = "") -> bytes:
        """
        Produce one variant of an encoded image.

        A passthrough spec returns the input bytes unchanged once they decode.
        A bounded spec shrinks the image to fit the box and re-encodes it in
        the format matching the source key's extension.

        Raises:
            TranscodeError: If the bytes cannot be decoded or encoded
        """
        try:
            image = load_image(image_bytes)
            box = spec.bounding_box
            if box is None:
                return image_bytes

            resized = resize_to_fit(image, *box)
            return encode_image(resized, output_format_for(source_key, image.format))

        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            raise TranscodeError(
                f"Failed to produce {spec.name} for {source_key or '<bytes>'}: {exc}",
                variant_name=spec.name,
                source_key=source_key,
            ) from exc


class S3ObjectEnumerator(ObjectEnumerator):
    """Lists image objects under a bucket prefix."""

    def __init__(
        self,
        s3_client: S3ClientProtocol,
        logger: LoggerProtocol,
        catalog: Sequence[VariantSpec] = VARIANT_CATALOG,
        skip_derived: bool = True,
        retry: Optional[Callable[[Callable[..., Any]], Callable[..., Any]]] = None,
    ):
        self._s3_client = s3_client
        self._logger = logger
        self._catalog = tuple(catalog)
        self._skip_derived = skip_derived
        self._list = retry(self._list_images) if retry else self._list_images

    def discover(self, bucket: str, prefix: str) -> List[SourceObject]:
        """
        Discover image objects in listing order.

        Raises:
            DiscoveryError: If the listing call cannot complete
        """
        prefix = prefix.strip("/")
        list_prefix = f"{prefix}/" if prefix else ""
        self._logger.info(f"Listing images in s3://{bucket}/{list_prefix}")

        objects = self._list(bucket, list_prefix)

        self._logger.info(f"Found {len(objects)} images in s3://{bucket}/{list_prefix}")
        return objects

    def _list_images(self, bucket: str, list_prefix: str) -> List[SourceObject]:
        objects: List[SourceObject] = []

        with wrap_s3_errors(DiscoveryError, f"Listing s3://{bucket}/{list_prefix}"):
            paginator = self._s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket, Prefix=list_prefix):
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    size = int(obj.get("Size", 0))
                    if not is_image_key(key):
                        continue
                    if size == 0:
                        self._logger.debug(f"Skipping empty object {key}")
                        continue
                    if self._skip_derived and is_derived_key(key, self._catalog):
                        self._logger.info(f"Skipping {key}: name matches a variant suffix")
                        continue
                    objects.append(SourceObject(key=key, size_bytes=size))

        return objects


class PipelineRunner:
    """
    Runs every catalog variant for each source object, strictly in order.

    A fetch or staging failure skips the object and is kept in
    ``fetch_error``; a transcode, publish or staged-read failure skips only
    that variant. Both are recorded in the object's outcome.
    """

    def __init__(
        self,
        s3_client: S3ClientProtocol,
        transcoder: TranscoderProtocol,
        config: RunConfig,
        logger: LoggerProtocol,
        catalog: Sequence[VariantSpec] = VARIANT_CATALOG,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._s3_client = s3_client
        self._transcoder = transcoder
        self._config = config
        self._logger = logger
        self._catalog = validate_catalog(catalog)
        self._metrics_collector = metrics_collector

        retry = retry_policy_for(config)
        self._fetch = retry(self._fetch_object)
        self._publish = retry(self._publish_object)

    @property
    def catalog(self) -> Sequence[VariantSpec]:
        return self._catalog

    @property
    def config(self) -> RunConfig:
        return self._config

    def run(self, objects: Iterable[SourceObject]) -> List[ObjectOutcome]:
        """Process every object once and return one outcome per object."""
        sources = list(objects)
        outcomes: List[ObjectOutcome] = []

        with StagingArea(self._config.staging_dir) as staging, BatchOperationContextManager(
            operation_name=f"Variant generation for {len(sources)} images"
        ) as batch:
            for index, source in enumerate(sources, start=1):
                self._logger.info(f"Processing {index}/{len(sources)}: {source.key}")
                outcome = self.process_one(source, staging)
                outcomes.append(outcome)

                if outcome.fetch_error:
                    batch.add_error(outcome.fetch_error, item_identifier=source.key)
                for failure in outcome.failures:
                    batch.add_error(
                        f"{failure.variant_name} ({failure.stage}): {failure.error}",
                        item_identifier=source.key,
                    )

        return outcomes

    def process_one(
        self, source: SourceObject, staging: Optional[StagingArea] = None
    ) -> ObjectOutcome:
        """Fetch one object and publish all of its variants."""
        if staging is None:
            with StagingArea(self._config.staging_dir) as own_staging:
                return self.process_one(source, own_staging)

        start_time = time.time()
        log_context = LogContext(
            correlation_id=f"obj_{source.key}_{int(start_time * 1000)}",
            operation="process_object",
            component="pipeline_runner",
        ).with_metadata(source_key=source.key)
        outcome = ObjectOutcome(source_key=source.key)

        try:
            with self._measure("fetch"):
                raw_bytes = self._fetch(source.key)
        except FetchError as e:
            outcome.fetch_error = describe_error(e)
            outcome.processing_time = time.time() - start_time
            self._logger.error(
                "Fetch failed, skipping all variants",
                log_context.with_operation("fetch").with_metadata(error=str(e)),
            )
            return outcome

        try:
            staged_path = staging.stage(source.key, raw_bytes)
        except StagingError as e:
            outcome.fetch_error = describe_error(e)
            outcome.processing_time = time.time() - start_time
            self._logger.error(
                "Staging failed, skipping all variants",
                log_context.with_operation("stage").with_metadata(error=str(e)),
            )
            return outcome
        del raw_bytes

        try:
            for spec in self._catalog:
                try:
                    staged_bytes = staging.read(staged_path)
                except StagingError as e:
                    outcome.failures.append(
                        VariantFailure(variant_name=spec.name, stage="staging", error=describe_error(e))
                    )
                    self._logger.error(
                        "Reading staged copy failed",
                        log_context.with_operation("stage").with_metadata(variant=spec.name, error=str(e)),
                    )
                    continue
                self._process_variant(source, spec, staged_bytes, outcome, log_context)
        finally:
            staging.discard(staged_path)

        outcome.processing_time = time.time() - start_time
        self._logger.info(
            "Finished object",
            log_context,
            published=outcome.published_count,
            failed=outcome.failed_count,
        )
        return outcome

    def _process_variant(
        self,
        source: SourceObject,
        spec: VariantSpec,
        raw_bytes: bytes,
        outcome: ObjectOutcome,
        log_context: LogContext,
    ) -> None:
        variant_context = log_context.with_metadata(variant=spec.name)

        try:
            with self._measure("transcode"):
                encoded = self._transcoder.transform(raw_bytes, spec, source.key)
        except TranscodeError as e:
            outcome.failures.append(
                VariantFailure(variant_name=spec.name, stage="transcode", error=describe_error(e))
            )
            self._logger.error(
                "Transcode failed", variant_context.with_operation("transcode").with_metadata(error=str(e))
            )
            return

        derived_key = derive_variant_key(source.key, spec.name)
        content_type = content_type_for(derived_key)

        try:
            with self._measure("publish"):
                self._publish(derived_key, encoded, content_type)
        except PublishError as e:
            outcome.failures.append(
                VariantFailure(variant_name=spec.name, stage="publish", error=describe_error(e))
            )
            self._logger.error(
                "Publish failed", variant_context.with_operation("publish").with_metadata(error=str(e))
            )
            return

        location = object_location(self._config, derived_key)
        outcome.variants.append(
            ProcessedVariant(
                variant_name=spec.name,
                derived_key=derived_key,
                location=location,
                content_type=content_type,
                size_bytes=len(encoded),
            )
        )
        self._logger.debug("Published variant", variant_context.with_metadata(location=location))

    def _fetch_object(self, key: str) -> bytes:
        with wrap_s3_errors(FetchError, f"Fetching s3://{self._config.bucket}/{key}"):
            response = self._s3_client.get_object(Bucket=self._config.bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()

    def _publish_object(self, key: str, body: bytes, content_type: str) -> None:
        params = {
            "Bucket": self._config.bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
        }
        if self._config.public:
            params["ACL"] = PUBLIC_READ_ACL

        with wrap_s3_errors(PublishError, f"Publishing s3://{self._config.bucket}/{key}"):
            self._s3_client.put_object(**params)

    def _measure(self, operation: str) -> ContextManager[None]:
        if self._metrics_collector is None:
            return nullcontext()
        return self._metrics_collector.timed(operation)


class VariantPipeline:
    """Main orchestrator: enumerate, run, summarize."""

    def __init__(
        self,
        enumerator: ObjectEnumerator,
        runner: PipelineRunner,
        logger: LoggerProtocol,
    ):
        self._enumerator = enumerator
        self._runner = runner
        self._logger = logger

    @property
    def runner(self) -> PipelineRunner:
        return self._runner

    def process_all(self) -> RunSummary:
        """
        Process every image under the configured prefix.

        Raises:
            DiscoveryError: If listing fails; nothing is processed in that case
        """
        config = self._runner.config
        sources = self._enumerator.discover(config.bucket, config.prefix)

        if not sources:
            self._logger.warning(f"No images found in s3://{config.bucket}/{config.list_prefix}")
            return summarize_outcomes([])

        outcomes = self._runner.run(sources)
        return summarize_outcomes(outcomes)
