from __future__ import annotations

import errno
import logging
from pathlib import Path

from .fs import OSFileSystem

logger = logging.getLogger(__name__)


def discard(path: Path, filesystem: OSFileSystem) -> None:
    """Best-effort removal of a staging file; failures are only logged."""
    try:
        filesystem.unlink(str(path))
    except OSError as exc:
        logger.debug("Could not remove staging file %s: %s", path, exc)


def open_staging_file(path: Path, filesystem: OSFileSystem) -> int:
    # EMFILE clears as soon as another descriptor is closed, so spin on it.
    retries = 0
    while True:
        try:
            fd = filesystem.open(str(path))
        except OSError as exc:
            if exc.errno == errno.EMFILE:
                retries += 1
                continue
            raise
        if retries:
            logger.debug("Opened %s after %d EMFILE retries", path, retries)
        return fd


def write_all(fd: int, content: memoryview, filesystem: OSFileSystem) -> None:
    offset = 0
    total = len(content)
    while offset < total:
        written = filesystem.write(fd, content[offset:])
        offset += written


def stage(temp_path: Path, content: memoryview, filesystem: OSFileSystem) -> None:
    """Write `content` to `temp_path` and make it durable.

    The descriptor is closed exactly once on every path. If anything fails
    after the file exists, the file is removed and the original error is
    re-raised.
    """
    fd = open_staging_file(temp_path, filesystem)
    try:
        write_all(fd, content, filesystem)
        filesystem.fsync(fd)
    except BaseException:
        try:
            filesystem.close(fd)
        except OSError as exc:
            logger.debug("Ignoring close error on %s during cleanup: %s", temp_path, exc)
        discard(temp_path, filesystem)
        raise

    try:
        filesystem.close(fd)
    except OSError:
        # Data is already on disk, but a failed close is still reported.
        discard(temp_path, filesystem)
        raise
