"""CLI entrypoint for semtype."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_STATE_FILENAME, ConfigError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .source_scanner import SourceParseError
from .stores import StateStoreError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semtype",
        description="Infer the next semantic version from changes to a package's public API.",
    )
    parser.add_argument(
        "--dir",
        default=".",
        help="Directory of the package to analyze (defaults to current directory).",
    )
    parser.add_argument(
        "--state",
        default=None,
        help=f"Path to the state file (defaults to <dir>/{DEFAULT_STATE_FILENAME}).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and print the next version without updating the state file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write diagnostics to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint: print the next version or exit non-zero on fatal errors."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logger = configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    orchestrator = Orchestrator(logger=logger)

    try:
        outcome = orchestrator.run(args.dir, state_path=args.state, dry_run=bool(args.dry_run))
    except (FileNotFoundError, NotADirectoryError) as exc:
        logger.debug("Aborting: %s", exc)
        parser.exit(1, f"semtype: {exc}\n")
    except (SourceParseError, ConfigError, StateStoreError) as exc:
        logger.debug("Aborting: %s", exc, exc_info=True)
        parser.exit(1, f"semtype failed: {exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        logger.debug("Unexpected failure", exc_info=True)
        parser.exit(1, f"semtype failed: {exc}\nRun with --verbose for more details.\n")

    print(outcome.version)


if __name__ == "__main__":
    main(sys.argv[1:])
