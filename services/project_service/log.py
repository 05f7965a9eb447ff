import logging
import os
import sys

from loguru import logger

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logger(level: str = LOG_LEVEL):
    """Replace loguru's default sink with a single stdout sink."""
    # pika logs every connection attempt at INFO
    logging.getLogger("pika").setLevel(logging.WARNING)

    logger.remove()
    logger.add(
        sink=sys.stdout,
        level=level.upper(),
        diagnose=False,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <bold><white>{message}</white></bold> | <dim>{extra}</dim>",
    )
