import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

DEFAULT_LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("powerbudget")


def parse_level(level) -> int:
    """Accept either a logging constant or a level name such as ``"debug"``."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(log_file: Optional[str] = None, level=DEFAULT_LOG_LEVEL) -> Optional[str]:
    """Attach a stream handler and, if ``log_file`` is given, a rotating file handler.

    Repeated calls do not stack duplicate handlers.
    """
    root_logger = logging.getLogger()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    has_stream = any(
        isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler)
        for handler in root_logger.handlers
    )
    if not has_stream:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)

    if log_file:
        log_dir = os.path.dirname(log_file) or "."
        os.makedirs(log_dir, exist_ok=True)

        normalized_target = os.path.abspath(log_file)
        has_file = False
        for handler in root_logger.handlers:
            if isinstance(handler, RotatingFileHandler) and os.path.abspath(handler.baseFilename) == normalized_target:
                has_file = True
                break
        if not has_file:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,
                backupCount=10,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

    root_logger.setLevel(parse_level(level))

    logger.debug("Logging initialized", extra={"log_file": log_file})
    return log_file
