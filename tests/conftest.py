from __future__ import annotations

from typing import Iterator

import pytest

from durablewrite.config import Settings, configure
from durablewrite.writer import shutdown_default_executor


@pytest.fixture(autouse=True)
def reset_runtime(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give each test default settings and a fresh default executor."""
    monkeypatch.delenv("DURABLEWRITE_MAX_WORKERS", raising=False)
    monkeypatch.delenv("DURABLEWRITE_LOG_LEVEL", raising=False)
    configure(Settings())
    yield
    shutdown_default_executor()
