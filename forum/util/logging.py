"""Standard library logging for third-party packages.

Forum code logs through logfire; this only keeps library loggers at a
sensible level for the deployment environment.
"""

import logging
import sys

from forum.config import Settings

QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncio")


def level_for(settings: Settings) -> int:
    if settings.debug:
        return logging.DEBUG
    return logging.WARNING if settings.environment == "production" else logging.INFO


def setup_logging(settings: Settings) -> None:
    """Install a stdout handler on the root logger, replacing any other."""
    level = level_for(settings)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stdout,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging at %s for %s", logging.getLevelName(level), settings.environment
    )
