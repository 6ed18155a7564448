# main.py

"""Entry point for the catalog_feed service (HTTP server or one-shot CLI)."""

import argparse
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import ConfigError, Settings
from src.render.xml_renderer import SCHEMAS

logger = logging.getLogger("catalog_feed.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="catalog_feed",
        description="Serve the remote product catalog as an XML feed.",
        epilog=f"Available schemas: {', '.join(sorted(SCHEMAS))}",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Refresh once, write the XML and exit (no HTTP server).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_path",
        help="File to write the XML to with --once (default: stdout).",
    )
    parser.add_argument(
        "--schema",
        choices=sorted(SCHEMAS),
        default=None,
        help=f"Output schema (default: {Settings.XML_SCHEMA}).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Probe the catalog API and report connectivity.",
    )
    return parser


def _check_config() -> None:
    """Exit with status 1 on configuration problems."""
    problems = Settings.validate()
    for problem in problems:
        logger.critical("Configuration error: %s", problem)
    if problems:
        sys.exit(1)


def main() -> None:
    """Route to the HTTP service (default), --once or --health."""
    log_file = setup_logging()
    logger.info("catalog_feed starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()
    if args.schema:
        Settings.XML_SCHEMA = args.schema

    _check_config()

    from src.cli.runner import run_health_check, run_once, serve

    try:
        if args.health:
            sys.exit(run_health_check())
        elif args.once:
            sys.exit(run_once(args.output_path, args.schema))
        else:
            serve(args.schema)
    except ConfigError as exc:
        logger.critical("Configuration error: %s", exc)
        sys.exit(1)
    except Exception:
        logger.critical("Fatal error during startup", exc_info=True)
        raise


if __name__ == "__main__":
    main()
