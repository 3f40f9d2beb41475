from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .config import Settings, SettingsError, configure, load_settings
from .naming import temp_name_pid
from .writer import shutdown_default_executor, write_atomic

logger = logging.getLogger(__name__)


def _error(message: str) -> None:
    print(message, file=sys.stderr)


def _load_settings_or_exit(config_path: str | None) -> Settings:
    try:
        return load_settings(Path(config_path) if config_path else None)
    except SettingsError as exc:
        _error(str(exc))
        raise SystemExit(2) from exc


def _pid_alive(pid: int) -> bool:
    if pid == os.getpid():
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        pass
    return True


def cmd_write(args: argparse.Namespace) -> None:
    if args.input:
        try:
            content = Path(args.input).read_bytes()
        except OSError as exc:
            _error(f"Failed to read input {args.input}: {exc}")
            raise SystemExit(1) from exc
    else:
        content = sys.stdin.buffer.read()

    destination = Path(args.dest)
    try:
        write_atomic(destination, content).result()
    except OSError as exc:
        _error(f"Failed to write {destination}: {exc}")
        raise SystemExit(1) from exc
    finally:
        shutdown_default_executor()
    print(f"Wrote {len(content)} bytes to {destination}")


def cmd_clean(args: argparse.Namespace) -> None:
    directory = Path(args.dir)
    if not directory.is_dir():
        _error(f"Not a directory: {directory}")
        raise SystemExit(2)

    removed = 0
    for path in sorted(directory.iterdir()):
        pid = temp_name_pid(path.name)
        if pid is None or not path.is_file():
            continue
        if not args.force and _pid_alive(pid):
            logger.info("Skipping %s: process %d is still running", path, pid)
            continue
        if args.dry_run:
            print(f"Would remove {path}")
        else:
            path.unlink(missing_ok=True)
            print(f"Removed {path}")
        removed += 1
    if not removed:
        print("No leftover staging files")


def cmd_validate(args: argparse.Namespace) -> None:
    _load_settings_or_exit(args.config)
    print("Settings OK")


def cmd_version(_: argparse.Namespace) -> None:
    print(f"durablewrite {__version__}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="durablewrite")
    parser.add_argument("--version", action="version", version=f"durablewrite {__version__}")
    parser.add_argument("--config", default=None, help="Path to a settings YAML file")
    parser.add_argument("--verbose", "-v", action="store_true")
    subparsers = parser.add_subparsers(dest="command")

    write = subparsers.add_parser("write", help="Atomically replace a file")
    write.add_argument("dest")
    write.add_argument("--input", default=None, help="Read content from this file, not stdin")
    write.set_defaults(func=cmd_write)

    clean = subparsers.add_parser("clean", help="Remove staging files left by dead processes")
    clean.add_argument("dir")
    clean.add_argument("--dry-run", action="store_true", dest="dry_run")
    clean.add_argument("--force", action="store_true", help="Ignore whether the owner is alive")
    clean.set_defaults(func=cmd_clean)

    validate = subparsers.add_parser("validate")
    validate.add_argument("--config", required=True)
    validate.set_defaults(func=cmd_validate)

    version = subparsers.add_parser("version")
    version.set_defaults(func=cmd_version)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        raise SystemExit(1)
    settings = _load_settings_or_exit(args.config)
    configure(settings)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
