import logging
from .config import server

LOGGER_NAME = 'swipe_leaderboard'
LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

_configured = False


def setup_logging(level: str = None):
    """Configure the root handler once for the whole service"""
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=getattr(logging, (level or server.LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT
    )
    _configured = True


def get_logger(name: str = None) -> logging.Logger:
    setup_logging()
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
