"""
mt2_draft/logger.py
Application-wide logger shared by the non-UI modules.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from mt2_draft.constants import LOG_FOLDER, LOG_FILE_NAME

LOGGER_NAME = "mt2_draft"
LOG_FORMAT = "[%(asctime)s] %(levelname)-5s [%(module)s] %(message)s"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3


def create_logger(log_folder: str = LOG_FOLDER, level: int = logging.INFO):
    """
    Returns the shared application logger.
    Handlers are attached once; later calls reuse the configured logger.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    try:
        if not os.path.exists(log_folder):
            os.makedirs(log_folder)
        file_handler = RotatingFileHandler(
            os.path.join(log_folder, LOG_FILE_NAME),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as error:
        # Read-only working directory: fall back to the console only
        sys.stderr.write(f"Unable to open log file in {log_folder}: {error}\n")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(logging.WARNING)
    logger.addHandler(stream_handler)

    return logger
