from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .writer import write_atomic_sync


def atomic_write_bytes(path: Path, data: bytes, *, make_parents: bool = True) -> None:
    if make_parents:
        path.parent.mkdir(parents=True, exist_ok=True)
    write_atomic_sync(path, data)


def atomic_write_text(
    path: Path, data: str, encoding: str = "utf-8", *, make_parents: bool = True
) -> None:
    atomic_write_bytes(path, data.encode(encoding), make_parents=make_parents)


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2) -> None:
    atomic_write_text(path, json.dumps(payload, indent=indent, sort_keys=True) + "\n")
