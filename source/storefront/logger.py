"""Console loggers shared by the storefront components."""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class Logger:
    """
    Hands out named loggers that write to stderr in one common format.

    The level defaults to the LOG_LEVEL environment variable.
    """

    @staticmethod
    def get_logger(name: str, level=None) -> logging.Logger:
        if level is None:
            level = logging.getLevelName(LOG_LEVEL)

        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Loggers are process-wide; attach the handler once
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)

        return logger
