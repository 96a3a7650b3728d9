import logging
import os

ROOT_LOGGER = "flowstream"


def apply_log_level() -> int:
    """Set the package log level from FLOWSTREAM_LOG_LEVEL; module loggers inherit it."""
    level_str = os.getenv("FLOWSTREAM_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_str, logging.INFO)
    logging.getLogger(ROOT_LOGGER).setLevel(level)
    return level


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    ))
    root.addHandler(handler)
    root.propagate = False
    apply_log_level()
    return root


def get_logger(name: str) -> logging.Logger:
    _root_logger()
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
