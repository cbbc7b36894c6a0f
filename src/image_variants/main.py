"""Main module for the image variants CLI."""

import sys
import argparse

from . import __version__
from .core.variants import VARIANT_CATALOG
from .process_images import add_process_arguments, run_from_args


def main() -> None:
    """
    Entry point for the unified command-line interface of image-variants.

    Sets up an `ArgumentParser` with the "process" and "version" commands
    and exits with the code of the selected command.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="image-variants",
        description="Image Variants - resize every image under an S3 prefix into fixed sizes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process every image in a folder, uploading public variants
  image-variants process --bucket my-bucket --prefix icuvids/2/thumbnails

  # Keep the variants private
  image-variants process --bucket my-bucket --private

  # Show version
  image-variants version
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser: argparse.ArgumentParser = subparsers.add_parser(
        "process", help="Create and upload variants for every image under a prefix"
    )
    add_process_arguments(process_parser)

    subparsers.add_parser("version", help="Show version information")

    args: argparse.Namespace = parser.parse_args()

    if args.command == "process":
        sys.exit(run_from_args(args))

    elif args.command == "version":
        print("Image Variants CLI")
        print(f"Version {__version__}")
        print(f"Variants: {', '.join(v.name for v in VARIANT_CATALOG)}")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
