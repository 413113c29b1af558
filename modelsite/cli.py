"""CLI entrypoint for modelsite builds."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator
from .toolchains import RegistryError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modelsite",
        description="Validate Concerto models and publish generated artifacts as a static site.",
    )
    parser.add_argument(
        "filter",
        nargs="?",
        default=None,
        help="Only process source files whose full path matches this regular expression.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .modelsite.yml or the directory holding it (defaults to current directory).",
    )
    parser.add_argument(
        "--force-publish",
        action="store_true",
        default=None,
        help="Skip downloading external models (same as FORCE_PUBLISH=1).",
    )
    parser.add_argument(
        "--server-root",
        default=None,
        help="Root URL used for links in rendered pages (overrides SERVER_ROOT).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for modelsite builds."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    if args.force_publish:
        config = replace(config, force_publish=True)
    if args.server_root:
        config = replace(config, server_root=args.server_root)

    try:
        orchestrator = Orchestrator(config)
    except (RegistryError, ValueError) as exc:
        parser.exit(1, f"modelsite failed to load toolchains: {exc}\n")

    try:
        result = orchestrator.run(args.filter)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    index_page = result.index_page or config.build_dir / "index.html"
    print(f"Site index written to {_relativize(index_page)} ({len(result.index)} models)")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
