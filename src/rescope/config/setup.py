import logging
from logging import Logger
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
        name: Optional[str] = "rescope",
        level: Union[int, str] = logging.INFO
) -> Logger:
    """
    Set up and configure a logger.

    :param name: Name for the logger. If None, configures the root logger.
    :param level: Logging level, as a number or a level name.
    :return: Configured logger instance.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
