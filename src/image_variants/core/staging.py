"""Scoped local staging area for downloaded source objects."""

import hashlib
import itertools
import logging
import posixpath
import re
import tempfile
from pathlib import Path
from typing import Optional

from .exceptions import StagingError
from .logging_config import DEFAULT_LOGGER_NAME

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.]")
MAX_SUFFIX_LENGTH = 10


def staged_filename(sequence: int, key: str) -> str:
    """
    Local file name for one staged key.

    Only a short digest of the key and its (sanitized, truncated) extension
    are used, so S3 keys of any length map to a short, safe name.
    """
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
    suffix = _UNSAFE_CHARS.sub("", posixpath.splitext(key)[1])[:MAX_SUFFIX_LENGTH]
    return f"{sequence:06d}-{digest}{suffix}"


class StagingArea:
    """
    Temporary directory holding one object's bytes at a time.

    Use as a context manager; the directory and everything in it is removed
    on exit, whether the run finished or raised. Local I/O failures surface
    as :class:`StagingError`.

    Example:
        with StagingArea() as staging:
            path = staging.stage("pics/a.jpg", data)
            ...
            staging.discard(path)
    """

    def __init__(self, root_dir: Optional[str] = None):
        self._root_dir = root_dir
        self._tmp: Optional[tempfile.TemporaryDirectory] = None
        self._counter = itertools.count(1)
        self._logger = logging.getLogger(f"{DEFAULT_LOGGER_NAME}.staging")

    def __enter__(self) -> "StagingArea":
        self._tmp = tempfile.TemporaryDirectory(prefix="image-variants-", dir=self._root_dir)
        self._logger.debug(f"Staging directory: {self._tmp.name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.cleanup()
        return False

    @property
    def path(self) -> Path:
        if self._tmp is None:
            raise RuntimeError("StagingArea used outside of its 'with' block")
        return Path(self._tmp.name)

    def stage(self, key: str, data: bytes) -> Path:
        """Write ``data`` for ``key`` into the staging directory and return its path."""
        target = self.path / staged_filename(next(self._counter), key)
        try:
            target.write_bytes(data)
        except OSError as e:
            target.unlink(missing_ok=True)
            raise StagingError(f"Staging {key} failed: {e}") from e
        return target

    def read(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise StagingError(f"Reading staged file {path.name} failed: {e}") from e

    def discard(self, path: Path) -> None:
        """Delete one staged file; missing files are ignored."""
        path.unlink(missing_ok=True)

    def cleanup(self) -> None:
        if self._tmp is not None:
            self._logger.debug(f"Removing staging directory: {self._tmp.name}")
            self._tmp.cleanup()
            self._tmp = None
