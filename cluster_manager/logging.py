"""Logging configuration for the cluster_manager package."""
import logging
import sys

# Libraries that log too much at INFO
NOISY_LOGGERS = ("urllib3", "kubernetes")


def setup_logging(level: str = "INFO", fmt: str = None, debug: bool = False) -> logging.Logger:
    """
    Configure logging for the command line tool.

    Log records go to stderr so they never mix with command output on stdout.

    Args:
        level: Logging level name from configuration
        fmt: Log format string
        debug: Force DEBUG level regardless of ``level``

    Returns:
        The package root logger
    """
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("cluster_manager")
    logger.setLevel(log_level)

    # Replace handlers from an earlier call, stderr may have been swapped since
    for old in list(logger.handlers):
        logger.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt or '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)

    if not debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    if debug:
        logger.debug("Debug mode enabled")
    return logger
