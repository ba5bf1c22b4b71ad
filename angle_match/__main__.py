from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Put the directory above this package on ``sys.path``.

    Running ``python angle_match/__main__.py`` directly leaves the package
    undiscoverable; the parent directory makes the absolute imports resolve.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # python -m angle_match
    from .app import run  # type: ignore[attr-defined]
    from .logging_config import setup_logging  # type: ignore[attr-defined]
except ImportError:
    # Executed as a plain script.
    _ensure_repo_root_on_path()
    from angle_match.app import run  # type: ignore[attr-defined]
    from angle_match.logging_config import setup_logging  # type: ignore[attr-defined]


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="angle-match", description="Angle Matching trainer")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    parser.add_argument("--settings", type=Path, default=None, help="settings JSON path")
    parser.add_argument("--db", type=Path, default=None, help="results sqlite database path")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for running the trainer from the command line."""
    args = _parse_args(argv)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)
    return run(settings_path=args.settings, db_path=args.db)


if __name__ == "__main__":
    raise SystemExit(main())
