import logging
import sys
from pythonjsonlogger import jsonlogger

from core.config import settings

LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'

def get_logger(name: str):
    """
    Configures and returns a logger that outputs structured JSON.
    The level is LOG_LEVEL from the settings.
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if the logger is already configured
    if logger.handlers:
        return logger

    logger.setLevel(settings.LOG_LEVEL)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    logger.addHandler(handler)

    return logger
