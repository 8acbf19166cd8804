import logging
import logging.handlers
import os
import re
import sys

LOG_FILE_PATH = os.environ.get("LOG_FILE")

TAG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
}

_TRAILING_NEWLINE = re.compile(r"(\r\n|\n|\r)\Z")

def setup_logging():
    """Configure the logging for the application."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Get the root logger
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s",
        "%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if LOG_FILE_PATH:
        try:
            os.makedirs(os.path.dirname(LOG_FILE_PATH) or ".", exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                LOG_FILE_PATH, maxBytes=10 * 1024 * 1024, backupCount=5  # 10 MB
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.error(f"Failed to create log file handler: {e}")

    app_logger = logging.getLogger("remote_backup")
    app_logger.setLevel(log_level)

    logging.info(f"Logging configured with level {log_level}")

def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


_status_logger = get_logger("remote_backup")

def log(message, tag: str = "info"):
    """
    Log a status message under a tag.

    Tags map onto logging levels (info, warn, error); unknown tags are logged
    at info. A single trailing line terminator is trimmed so process output
    can be forwarded line by line.
    """
    tag = tag or "info"
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    text = _TRAILING_NEWLINE.sub("", f"[{tag}] {message}", count=1)
    _status_logger.log(TAG_LEVELS.get(tag, logging.INFO), text)
