"""
Logging configuration for pymatrix.

Library modules only create loggers (``logging.getLogger(__name__)``) and
never attach handlers. Applications that want to see the call layer's
workspace queries and status codes call configure_logging().
"""

import logging


LOGGER_NAME = 'pymatrix'


def configure_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """
    Configure logging for the pymatrix package.

    Replaces any handlers a previous call installed, so calling this
    twice does not duplicate output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs

    Returns:
        The configured 'pymatrix' logger
    """
    log_level = getattr(logging, level.upper())

    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    package_logger = logging.getLogger(LOGGER_NAME)
    # The file handler records DEBUG regardless of the console level.
    package_logger.setLevel(min(log_level, logging.DEBUG) if log_file else log_level)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        file_handler.setFormatter(detailed_formatter)
        package_logger.addHandler(file_handler)

    # Prevent propagation to root logger
    package_logger.propagate = False

    return package_logger
