import logging
import os
import sys

LOG_LEVEL_ENV_VAR = "OGE_LOG_LEVEL"


def _configured_level(default: int = logging.WARNING) -> int:
    value = (os.getenv(LOG_LEVEL_ENV_VAR) or "").strip()
    if not value:
        return default
    if value.isdigit():
        return int(value)
    resolved = getattr(logging, value.upper(), None)
    return resolved if isinstance(resolved, int) else default


def get_logger(name: str = "ogeportal") -> logging.Logger:
    """Get a logger that outputs to stderr (stdout is kept for command output)."""
    logger = logging.getLogger(name)

    if name == "ogeportal" and not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            "[%(levelname)s] %(message)s"
        ))
        logger.addHandler(handler)
        logger.setLevel(_configured_level())

    return logger


logger = get_logger()
