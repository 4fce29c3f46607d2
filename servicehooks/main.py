"""Service hooks entry point.

Loads config, builds the service registry and serves hooks over HTTP.
Usage: servicehooks [--config config.yaml] [--check] [--host H] [--port P].
"""

import argparse
import logging
import sys
from pathlib import Path

from servicehooks.config import AppConfig, load_config
from servicehooks.dispatcher import Dispatcher
from servicehooks.logging import HookLogging
from servicehooks.registry import build_registry
from servicehooks.reporter import ExceptionReporter
from servicehooks.server import run_server

LOGGER_NAME = "servicehooks.main"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="servicehooks",
        description="Service hooks - receive platform events and dispatch them to services",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load config and list registered services, then exit",
    )
    parser.add_argument("--host", default=None, help="Override server.host")
    parser.add_argument("--port", type=int, default=None, help="Override server.port")
    return parser.parse_args(argv)


def build_dispatcher(config: AppConfig) -> Dispatcher:
    """Registry, reporter and dispatcher from config."""
    return Dispatcher(
        registry=build_registry(config),
        reporter=ExceptionReporter(config.reporter),
        slow_hook_seconds=config.dispatch.slow_hook_seconds,
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the hook server."""
    args = parse_args(argv)
    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger(LOGGER_NAME).warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)
    hook_logging = HookLogging(config.logging)
    hook_logging.setup()
    log = hook_logging.get_logger(LOGGER_NAME)

    try:
        dispatcher = build_dispatcher(config)
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1

    if args.check:
        print("Config OK:", ", ".join(f"{s.hook_name} ({s.title})" for s in dispatcher.registry))
        return 0

    host = args.host or config.server.host
    port = args.port if args.port is not None else config.server.port
    try:
        run_server(dispatcher, host, port)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
