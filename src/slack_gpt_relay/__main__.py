"""Entry point for running the Slack GPT relay.

This module provides the main entry point. It handles:
- Configuration loading (YAML file or environment)
- Logging setup with secret sanitization
- Health checks and dry runs
- Serving the events endpoint with uvicorn
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog
import uvicorn
from pydantic import ValidationError

from slack_gpt_relay._version import __version__

log = structlog.get_logger()


def setup_logging(debug: bool = False, log_format: str = "console") -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
    """
    from slack_gpt_relay.utils.logging import configure_logging

    configure_logging(level="DEBUG" if debug else "INFO", log_format=log_format)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="slack-gpt-relay",
        description="Slack GPT relay - answers Slack events with a language model",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: read from environment)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default=None,
        help="Log output format (default: from configuration)",
    )

    parser.add_argument("--host", default=None, help="Listen address (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (overrides config)")

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and validate without starting the server",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and exit",
    )

    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    """Load configuration and run the relay.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    log.info("starting_slack_gpt_relay", version=__version__)

    try:
        from slack_gpt_relay.config.loader import load_config, load_config_from_env

        if args.config is not None:
            log.info("loading_configuration", path=str(args.config))
            config = load_config(args.config)
        else:
            log.info("loading_configuration_from_environment")
            config = load_config_from_env()
        log.info("configuration_loaded", llm_provider=config.llm.provider)

        from slack_gpt_relay.utils.logging import configure_logging

        configure_logging(
            level="DEBUG" if args.debug else config.logging.level,
            log_format=args.format or config.logging.format,
        )

        if args.dry_run:
            log.info("dry_run_mode_config_valid")
            return 0

        if args.health_check:
            from slack_gpt_relay.utils.health import HealthChecker

            report = asyncio.run(HealthChecker(config).run_all_checks())
            if report.healthy:
                log.info("health_check_passed", checks=[c.name for c in report.checks])
                return 0
            log.error("health_check_failed", report=report.to_dict())
            return 1

        from slack_gpt_relay.server import create_app

        app = create_app(config)
        host = args.host or config.server.host
        port = args.port or config.server.port

        log.info("server_listening", host=host, port=port)
        uvicorn.run(app, host=host, port=port, log_config=None)
        return 0

    except FileNotFoundError as e:
        log.error("configuration_file_not_found", error=str(e))
        return 1
    except (ValueError, ValidationError) as e:
        log.error("configuration_invalid", error=str(e))
        return 1
    except Exception as e:
        log.exception("fatal_error", error=str(e))
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_format=args.format or "console")

    try:
        return run(args)
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
