"""Filesystem operations used by the write pipeline.

Every call the pipeline makes against the disk goes through an
`OSFileSystem` instance. Tests inject faults by subclassing it and
overriding single methods, which keeps the real `os` module untouched.
"""

from __future__ import annotations

import os

OPEN_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_CLOEXEC", 0)
DEFAULT_FILE_MODE = 0o666


class OSFileSystem:
    def __init__(self, file_mode: int = DEFAULT_FILE_MODE) -> None:
        self.file_mode = file_mode

    def open(self, path: str) -> int:
        return os.open(path, OPEN_FLAGS, self.file_mode)

    def write(self, fd: int, data: memoryview) -> int:
        return os.write(fd, data)

    def fsync(self, fd: int) -> None:
        os.fsync(fd)

    def close(self, fd: int) -> None:
        os.close(fd)

    def rename(self, source: str, destination: str) -> None:
        os.replace(source, destination)

    def unlink(self, path: str) -> None:
        os.unlink(path)
