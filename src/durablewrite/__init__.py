from __future__ import annotations

__version__ = "0.3.0"

from .config import Settings, SettingsError, configure, get_settings, load_settings
from .fs import OSFileSystem
from .io_utils import atomic_write_bytes, atomic_write_json, atomic_write_text
from .naming import is_temp_name, next_temp_name
from .writer import write_atomic, write_atomic_async, write_atomic_sync

__all__ = [
    "OSFileSystem",
    "Settings",
    "SettingsError",
    "__version__",
    "atomic_write_bytes",
    "atomic_write_json",
    "atomic_write_text",
    "configure",
    "get_settings",
    "is_temp_name",
    "load_settings",
    "next_temp_name",
    "write_atomic",
    "write_atomic_async",
    "write_atomic_sync",
]
