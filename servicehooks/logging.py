"""Logging from config and env.

Levels (inclusive):
- ERROR: critical errors only
- WARNING: non-critical issues and ERROR
- INFO: one line per dispatched hook, WARNING, and ERROR
- DEBUG: HTTP access lines and all levels above

Root level and format come from logging.level / logging.format (env LOGGING_LEVEL,
LOGGING_FORMAT). logging.loggers overrides single loggers; urllib3 is held at
WARNING by default so collector and Web deliveries do not flood INFO output.
"""

import logging
from typing import Dict

from servicehooks.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Level name to logging constant; unknown names mean INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


class HookLogging:
    """Applies LoggingConfig to the root logger and to overridden loggers."""

    def __init__(self, config: LoggingConfig) -> None:
        self.level = _resolve_level(config.level)
        self.format = config.format or DEFAULT_FORMAT
        self.overrides: Dict[str, int] = {
            name: _resolve_level(level) for name, level in (config.loggers or {}).items()
        }

    def setup(self) -> None:
        logging.basicConfig(level=self.level, format=self.format, force=True)
        for name, level in self.overrides.items():
            # A DEBUG root turns every override back down to DEBUG
            logging.getLogger(name).setLevel(logging.DEBUG if self.level <= logging.DEBUG else level)

    def get_logger(self, name: str) -> logging.Logger:
        """Named logger; ``setup()`` must have run for output to appear."""
        return logging.getLogger(name)
