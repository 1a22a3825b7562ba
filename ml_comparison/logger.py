"""
loguru setup for the benchmark.

Modules log through ``from loguru import logger``; `init_logging` decides
where records go. It is safe to call more than once, each call replaces
the sinks added by the previous one.
"""

import os
import sys
from typing import Optional

from loguru import logger

from .config import LogConfig

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def init_logging(config: Optional[LogConfig] = None) -> None:
    """Send logs to stderr and, when `config.dir` is set, to daily files."""
    config = config or LogConfig()

    logger.remove()
    logger.add(sys.stderr, level=config.level, format=LOG_FORMAT)

    if config.dir:
        os.makedirs(config.dir, exist_ok=True)
        logger.add(
            sink=f"{config.dir}/{{time:YYYY-MM-DD}}.log",
            rotation=config.rotation,
            retention=config.retention,
            level=config.level,
            format=LOG_FORMAT,
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f"Logging initialized at level {config.level}")
