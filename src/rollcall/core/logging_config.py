import logging
import sys

LOG_FORMAT = "%(asctime)s - [%(name)s] - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Install the application-wide logging configuration.

    Logs go to stdout in one format: time - module name - level - message.
    Handlers installed earlier (for example by the Flask dev server) are
    removed so every line follows the same layout.
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if logger.hasHandlers():
        logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stdout_handler)
