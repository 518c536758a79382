"""
Logging configuration for Pongbot.

Every event carries the chat channel, and events logged while a command runs
also carry the command name (see ``command_context``).
"""

import sys
import logging
from pathlib import Path
from typing import Optional
import structlog
from structlog.typing import FilteringBoundLogger

from ..config import Settings, get_config


def setup_logging(config: Optional[Settings] = None) -> FilteringBoundLogger:
    """Setup structured logging for the application."""
    config = config or get_config()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    # Log lines go to stderr so command output on stdout stays clean
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.log_to_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
        handler.setLevel(level)
        logging.getLogger().addHandler(handler)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(channel=config.channel)

    logger = structlog.get_logger("pongbot")
    logger.info("Logging configured", level=config.log_level,
                to_file=config.log_file if config.log_to_file else None)

    return logger


def command_context(command: str):
    """Tag every event logged inside the block with ``command``."""
    return structlog.contextvars.bound_contextvars(command=command)
