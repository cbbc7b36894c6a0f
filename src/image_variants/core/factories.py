"""Factory classes for creating configured service instances."""

import os
from typing import Any, Mapping, Optional, Sequence, TYPE_CHECKING

import boto3
from botocore.config import Config

from .exceptions import CredentialsError
from .models import DEFAULT_REGION, RunConfig, VariantSpec
from .observability import MetricsCollector, StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol
from .services import (
    ImageTranscoderService,
    PipelineRunner,
    S3ObjectEnumerator,
    VariantPipeline,
    retry_policy_for,
)
from .variants import VARIANT_CATALOG

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
else:
    S3Client = Any


def resolve_region(environ: Optional[Mapping[str, str]] = None) -> str:
    """AWS_REGION, then AWS_DEFAULT_REGION, then us-east-1."""
    env = os.environ if environ is None else environ
    return env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or DEFAULT_REGION


def resolve_endpoint_url(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Custom S3 endpoint (MinIO, LocalStack, ...) from AWS_ENDPOINT_URL, if any."""
    env = os.environ if environ is None else environ
    return env.get("AWS_ENDPOINT_URL") or None


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(
        config: RunConfig, session: Optional[boto3.Session] = None
    ) -> S3Client:
        """
        Create an S3 client for the run.

        Credentials come from boto3's default chain: environment variables,
        shared config/CLI profiles, or an instance/task role.

        Raises:
            CredentialsError: If the chain yields no credentials. Checked
                before any request is sent.
        """
        session = session or boto3.Session(region_name=config.region)
        if session.get_credentials() is None:
            raise CredentialsError(
                "AWS credentials not found. Set AWS_ACCESS_KEY_ID and "
                "AWS_SECRET_ACCESS_KEY (AWS_REGION optional, defaults to "
                f"{DEFAULT_REGION}), or configure an AWS CLI profile or IAM role."
            )

        client_config = Config(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            # Retries are handled by retry_s3_operation
            retries={"total_max_attempts": 1},
        )
        return session.client(
            "s3",
            region_name=config.region,
            endpoint_url=config.endpoint_url,
            config=client_config,
        )


class ProcessingPipelineFactory:
    """Factory for creating the complete processing pipeline."""

    @staticmethod
    def create_pipeline(
        config: RunConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        catalog: Sequence[VariantSpec] = VARIANT_CATALOG,
    ) -> VariantPipeline:
        """Create a fully configured pipeline for one run."""
        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(config)

        if logger is None:
            logger = StructuredLogger()

        enumerator = S3ObjectEnumerator(
            s3_client,
            logger,
            catalog=catalog,
            skip_derived=config.skip_derived,
            retry=retry_policy_for(config),
        )
        runner = PipelineRunner(
            s3_client,
            ImageTranscoderService(),
            config,
            logger,
            catalog=catalog,
            metrics_collector=metrics_collector,
        )

        return VariantPipeline(enumerator=enumerator, runner=runner, logger=logger)
