#!/usr/bin/env python3
"""
S3 Image Variants Processor

Lists images under a bucket prefix → Resizes each into the fixed variant
catalog → Uploads every variant next to its original
"""

import sys
import time
import argparse
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from .core import (
    ConfigurationError,
    ImageVariantsError,
    RunConfig,
    RunSummary,
    enable_debug_logging,
    get_logger,
)
from .core.factories import ProcessingPipelineFactory, resolve_endpoint_url, resolve_region
from .core.observability import MetricsCollector, StructuredLogger
from .core.reporting import ResultReporter, write_summary_json
from .core.variants import VARIANT_CATALOG

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INTERRUPTED = 130


def add_process_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the processing options on ``parser``."""
    parser.add_argument("--bucket", required=True, help="S3 bucket holding the images")
    parser.add_argument(
        "--prefix",
        default="",
        help="Folder path inside the bucket (e.g. icuvids/2/thumbnails); empty for the root",
    )

    visibility = parser.add_mutually_exclusive_group()
    visibility.add_argument(
        "--public",
        dest="public",
        action="store_true",
        default=True,
        help="Upload variants with a public-read ACL (default)",
    )
    visibility.add_argument(
        "--private",
        dest="public",
        action="store_false",
        help="Upload variants without a public ACL",
    )

    parser.add_argument(
        "--region", default=None, help="AWS region (default: AWS_REGION or us-east-1)"
    )
    parser.add_argument(
        "--endpoint-url",
        default=None,
        help="Custom S3 endpoint (default: AWS_ENDPOINT_URL)",
    )
    parser.add_argument(
        "--include-derived",
        action="store_true",
        help="Also process keys that already carry a variant suffix",
    )
    parser.add_argument(
        "--max-attempts", type=int, default=3, help="Attempts per S3 call (default: 3)"
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        default=1.0,
        help="Initial retry delay in seconds, doubled per attempt (default: 1.0)",
    )
    parser.add_argument(
        "--connect-timeout", type=float, default=10.0, help="S3 connect timeout in seconds"
    )
    parser.add_argument(
        "--read-timeout", type=float, default=60.0, help="S3 read timeout in seconds"
    )
    parser.add_argument(
        "--staging-dir", default=None, help="Parent directory for the temporary staging area"
    )
    parser.add_argument(
        "--summary-json", default=None, help="Write the final summary as JSON to this path"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the variants processor.

    Returns:
        An `argparse.Namespace` object containing the parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Generate resized variants for every image under an S3 prefix"
    )
    add_process_arguments(parser)
    return parser.parse_args(argv)


def build_config(
    args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None
) -> RunConfig:
    """
    Turn parsed arguments into an immutable RunConfig.

    Raises:
        ConfigurationError: If any option is invalid
    """
    try:
        return RunConfig(
            bucket=args.bucket,
            prefix=args.prefix,
            public=args.public,
            region=args.region or resolve_region(environ),
            endpoint_url=args.endpoint_url or resolve_endpoint_url(environ),
            skip_derived=not args.include_derived,
            max_attempts=args.max_attempts,
            retry_delay=args.retry_delay,
            connect_timeout=args.connect_timeout,
            read_timeout=args.read_timeout,
            staging_dir=args.staging_dir,
            debug=args.debug,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def log_configuration(config: RunConfig) -> None:
    """Log processing configuration."""
    logger = get_logger()
    logger.info("=" * 80)
    logger.info("S3 IMAGE VARIANTS PROCESSOR")
    logger.info("=" * 80)
    logger.info(f"  Bucket:        {config.bucket}")
    logger.info(f"  Folder:        {config.prefix or '(root)'}")
    logger.info(f"  Public access: {'Yes' if config.public else 'No'}")
    logger.info(f"  Region:        {config.region}")
    if config.endpoint_url:
        logger.info(f"  Endpoint:      {config.endpoint_url}")
    logger.info(f"  Variants:      {', '.join(v.name for v in VARIANT_CATALOG)}")
    logger.info(f"  Max attempts:  {config.max_attempts}")
    logger.info("=" * 80)


def run_processing(
    config: RunConfig,
    summary_json: Optional[str] = None,
    s3_client: Optional[Any] = None,
) -> RunSummary:
    """
    Run one full pass over the configured prefix and report the result.

    Raises:
        CredentialsError: If no AWS credentials are available
        DiscoveryError: If the prefix cannot be listed
    """
    log_configuration(config)
    start_time = time.time()

    logger = StructuredLogger()
    metrics_collector = MetricsCollector()
    pipeline = ProcessingPipelineFactory.create_pipeline(
        config,
        s3_client=s3_client,
        logger=logger,
        metrics_collector=metrics_collector,
    )

    summary = pipeline.process_all()

    ResultReporter(logger).report(
        summary,
        total_time=time.time() - start_time,
        metrics_collector=metrics_collector,
    )
    if summary_json:
        path = write_summary_json(summary, summary_json)
        logger.info(f"Summary written to {path}")

    return summary


def run_from_args(args: argparse.Namespace) -> int:
    """
    Execute a run from parsed arguments and return the process exit code.

    Only fatal errors (configuration, credentials, listing) produce a
    non-zero code; failed objects or variants are reported, not fatal.
    """
    logger = get_logger()
    try:
        config = build_config(args)
        if config.debug:
            enable_debug_logging()

        run_processing(config, summary_json=args.summary_json)

    except KeyboardInterrupt:
        logger.warning("Processing interrupted by user.")
        return EXIT_INTERRUPTED
    except ImageVariantsError as e:
        logger.error(f"Processing failed: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"Processing failed: {e}", exc_info=True)
        return EXIT_FATAL

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``process-images`` script."""
    sys.exit(run_from_args(parse_args(argv)))


if __name__ == "__main__":
    main()
