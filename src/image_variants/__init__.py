"""Generate fixed-size image variants for every image under an S3 prefix."""

__version__ = "0.1.0"
