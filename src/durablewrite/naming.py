from __future__ import annotations

import itertools
import os
import re
from pathlib import Path

_TEMP_NAME_RE = re.compile(r"^\.\d+\.\d+$")


class TempNamer:
    """Hands out `.<pid>.<counter>` names for staging files.

    `next()` on an `itertools.count` is a single atomic step under the GIL,
    so concurrent callers never observe the same counter value.
    """

    def __init__(self, pid: int | None = None, start: int = 0) -> None:
        self._pid = pid
        self._counter = itertools.count(start)

    @property
    def pid(self) -> int:
        return self._pid if self._pid is not None else os.getpid()

    def next_id(self) -> str:
        return f"{self.pid}.{next(self._counter)}"

    def temp_path_for(self, destination: str | os.PathLike[str]) -> Path:
        return Path(destination).parent / f".{self.next_id()}"


_namer = TempNamer()


def next_temp_name(destination: str | os.PathLike[str]) -> Path:
    return _namer.temp_path_for(destination)


def is_temp_name(name: str) -> bool:
    return bool(_TEMP_NAME_RE.match(name))


def temp_name_pid(name: str) -> int | None:
    """Return the pid encoded in a staging file name, or None if it is not one."""
    if not is_temp_name(name):
        return None
    return int(name[1:].split(".")[0])
