from __future__ import annotations

import asyncio
import logging
import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional

from .config import get_settings
from .fs import OSFileSystem
from .naming import next_temp_name
from .stage import discard, stage

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException]], None]

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def default_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=get_settings().max_workers,
                thread_name_prefix="durablewrite",
            )
        return _executor


def shutdown_default_executor(wait: bool = True) -> None:
    global _executor
    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        executor.shutdown(wait=wait)


def _default_filesystem() -> OSFileSystem:
    return OSFileSystem(file_mode=get_settings().file_mode)


def _as_view(content: bytes | bytearray | memoryview) -> memoryview:
    return memoryview(content).cast("B").toreadonly()


def commit(temp_path: Path, destination: Path, filesystem: OSFileSystem) -> None:
    """Rename the staged file over `destination`, removing it if that fails."""
    try:
        filesystem.rename(str(temp_path), str(destination))
    except BaseException:
        discard(temp_path, filesystem)
        raise


def _run_pipeline(destination: Path, content: memoryview, filesystem: OSFileSystem) -> None:
    temp_path = next_temp_name(destination)
    logger.debug("Staging %d bytes for %s in %s", len(content), destination, temp_path.name)
    stage(temp_path, content, filesystem)
    commit(temp_path, destination, filesystem)
    logger.debug("Replaced %s", destination)


def _notify(callback: Callback, error: BaseException | None) -> None:
    try:
        callback(error)
    except Exception:
        logger.exception("Completion callback raised")


def write_atomic(
    path: str | os.PathLike[str],
    content: bytes | bytearray | memoryview,
    callback: Callback | None = None,
    *,
    filesystem: OSFileSystem | None = None,
    executor: Executor | None = None,
) -> Future[None]:
    """Atomically replace `path` with `content` on a worker thread.

    `callback`, if given, is called exactly once off the calling thread,
    after `write_atomic` has returned, with `None` on success or the first
    error raised by the pipeline. The returned future settles after the
    callback has run and carries the same outcome. On failure the
    destination is untouched and the staging file has been removed.

    If the executor refuses the work (for example after shutdown), the
    refusal is delivered the same way instead of being raised.
    """
    destination = Path(path)
    view = _as_view(content)
    fs = filesystem if filesystem is not None else _default_filesystem()
    runner = executor if executor is not None else default_executor()

    # Marked running up front: a submitted write cannot be cancelled.
    outcome: Future[None] = Future()
    outcome.set_running_or_notify_cancel()

    state_lock = threading.Lock()
    returned = False
    early: list[BaseException | None] = []

    def finish(error: BaseException | None) -> None:
        if callback is not None:
            _notify(callback, error)
        if error is None:
            outcome.set_result(None)
        else:
            outcome.set_exception(error)

    def run() -> None:
        error: BaseException | None = None
        try:
            _run_pipeline(destination, view, fs)
        except Exception as exc:
            error = exc
        with state_lock:
            if not returned:
                # Finished before write_atomic returned; it delivers this.
                early.append(error)
                return
        finish(error)

    try:
        runner.submit(run)
    except RuntimeError as exc:
        logger.debug("Executor refused write to %s: %s", destination, exc)
        early.append(exc)

    with state_lock:
        returned = True
    if early:
        threading.Thread(
            target=finish, args=(early[0],), name="durablewrite-complete", daemon=True
        ).start()
    return outcome


def write_atomic_sync(
    path: str | os.PathLike[str],
    content: bytes | bytearray | memoryview,
    *,
    filesystem: OSFileSystem | None = None,
) -> None:
    """Same pipeline as `write_atomic`, run on the calling thread."""
    fs = filesystem if filesystem is not None else _default_filesystem()
    _run_pipeline(Path(path), _as_view(content), fs)


async def write_atomic_async(
    path: str | os.PathLike[str],
    content: bytes | bytearray | memoryview,
    *,
    filesystem: OSFileSystem | None = None,
    executor: Executor | None = None,
) -> None:
    future = write_atomic(path, content, filesystem=filesystem, executor=executor)
    await asyncio.wrap_future(future)
