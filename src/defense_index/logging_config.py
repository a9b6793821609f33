"""
Centralized logging configuration for the Global Defense Index.

Handlers live on the ``defense_index`` package logger and are attached
once. Module loggers carry no handlers of their own and propagate to it,
so each record is written once however many modules call create_logger.

Environment:
    LOG_LEVEL: Level of the package logger (default INFO)
    LOG_DIR: Directory for a plain-text log file (optional)
    LOG_FILE: Log file name, joined to LOG_DIR when both are set
"""

import logging
import os
import sys
from typing import Optional, Tuple, Union

import colorlog

PACKAGE_LOGGER = "defense_index"
DEFAULT_LOG_FILE = f"{PACKAGE_LOGGER}.log"

CONSOLE_FORMAT = "%(log_color)s[%(levelname)s]%(reset)s %(blue)s[%(name)s]%(reset)s %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# Matched against the module of the exception type
TROUBLESHOOTING = (
    ("botocore", (
        "Check AWS credentials and S3_BUCKET_NAME in .env",
        "Confirm the bucket exists and the document key is readable",
    )),
    ("boto3", (
        "Check AWS credentials and S3_BUCKET_NAME in .env",
    )),
    ("duckdb", (
        "Check DUCKDB_PATH in .env",
        "Make sure no other process holds the database file open",
    )),
    ("openai", (
        "Check LLM_API_KEY, LLM_MODEL and LLM_BASE_URL in .env",
        "Search for an existing entity instead of generating one",
    )),
)

DEFAULT_HINTS = (
    "Check the storage backend settings in .env",
    "Verify the shared document exists and is readable",
    "Review recent admin edits",
)


def create_logger(
    name: Optional[str] = None,
    log_level: Union[int, str, None] = None,
    log_dir: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Return a module logger under the package logger.

    Names outside the package are nested under it, so ``__main__`` becomes
    ``defense_index.__main__``. An explicit ``log_level`` applies to this
    logger only; otherwise it inherits the package level.

    :param name: Name of the logger (typically __name__)
    :param log_level: Level for this logger (optional)
    :param log_dir: Directory for the package log file (default: LOG_DIR)
    :param log_file: Package log file name (default: LOG_FILE)
    :return: Logger that propagates to the package logger
    """
    package_logger = _configure_package_logger(
        log_dir or os.getenv("LOG_DIR") or None,
        log_file or os.getenv("LOG_FILE") or None,
    )

    if not name or name == PACKAGE_LOGGER:
        return package_logger
    if not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"

    logger = colorlog.getLogger(name)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(log_level.upper() if isinstance(log_level, str) else (log_level or logging.NOTSET))
    return logger


def _configure_package_logger(log_dir: Optional[str], log_file: Optional[str]) -> logging.Logger:
    package_logger = colorlog.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    package_logger.propagate = False

    if not any(isinstance(h, colorlog.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in package_logger.handlers):
        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            colorlog.ColoredFormatter(CONSOLE_FORMAT, log_colors=LOG_COLORS, secondary_log_colors={})
        )
        package_logger.addHandler(console_handler)

    if log_dir or log_file:
        path = _log_file_path(log_dir, log_file)
        if not any(isinstance(h, logging.FileHandler) and h.baseFilename == path
                   for h in package_logger.handlers):
            file_handler = logging.FileHandler(path)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            package_logger.addHandler(file_handler)

    return package_logger


def _log_file_path(log_dir: Optional[str], log_file: Optional[str]) -> str:
    log_file = log_file or DEFAULT_LOG_FILE
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, log_file)
    return os.path.abspath(log_file)


def troubleshooting_hints(e: BaseException) -> Tuple[str, ...]:
    """Hints for an unexpected error, picked by the library that raised it."""
    module = (type(e).__module__ or "").lstrip("_")
    for prefix, hints in TROUBLESHOOTING:
        if module == prefix or module.startswith(f"{prefix}."):
            return hints
    return DEFAULT_HINTS


def log_exception(logger, e, context=None):
    """
    Standardized exception logging with optional context.

    :param logger: Logger instance
    :param e: Exception object
    :param context: Optional additional context for the error
    """
    logger.critical("UNEXPECTED ERROR")
    logger.critical(f"Error Type: {type(e).__module__}.{type(e).__name__}")
    logger.critical(f"Error Details: {str(e)}")

    if context:
        logger.critical(f"Context: {context}")

    logger.critical("Troubleshooting:")
    for number, hint in enumerate(troubleshooting_hints(e), start=1):
        logger.critical(f"  {number}. {hint}")
