# core/logging_config.py
import logging
from typing import Optional

from core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "pass21"


def setup_logger(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the shared "pass21" logger once. The level comes from
    settings.LOG_LEVEL; an unknown level name falls back to INFO.
    """
    logger = logging.getLogger(LOGGER_NAME)
    resolved = getattr(logging, (level or settings.LOG_LEVEL).upper(), None)
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    # Handler is attached once; later calls only adjust the level
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


logger = setup_logger()
