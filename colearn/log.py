"""
Console logging setup with colored level names
"""

import logging
import colorlog

from colearn.config import LOG_LEVEL

LOG_FORMAT = (
    "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s "
    "%(blue)s%(name)s%(reset)s - %(message)s"
)
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Attach a colored console handler to the root logger (once)."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers:
        if isinstance(getattr(handler, "formatter", None), colorlog.ColoredFormatter):
            return

    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=LOG_COLORS,
        )
    )
    root.addHandler(handler)
