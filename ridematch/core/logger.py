"""
Logging for scheduling runs: console output plus one log file per run.
"""

import logging
import os
from datetime import datetime
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _attach(logger: logging.Logger, handler: logging.Handler, level: int):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def _run_log_path(log_file: Optional[str], log_dir: str) -> str:
    """Explicit file names keep their own directory; otherwise one file per run."""
    if log_file is None:
        log_file = f"ridematch_{datetime.now():%Y%m%d_%H%M%S}.log"
    else:
        log_dir = os.path.dirname(log_file) or log_dir
        log_file = os.path.basename(log_file)
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, log_file)


def setup_logger(name: str, log_file: Optional[str] = None,
                 level: int = logging.INFO, log_dir: str = "logs",
                 to_file: bool = True) -> logging.Logger:
    """
    Configure the named logger once; later calls return it unchanged.

    Args:
        name: Logger name, 'ridematch' for the CLI
        log_file: Log file name; a timestamped run file when omitted
        level: Level applied to the logger and its handlers
        log_dir: Directory for run files
        to_file: False for console output only

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    _attach(logger, logging.StreamHandler(), level)

    if to_file:
        log_path = _run_log_path(log_file, log_dir)
        _attach(logger, logging.FileHandler(log_path, encoding='utf-8'), level)
        logger.info(f"Writing run log to {log_path}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Named logger, given a console handler if nothing configured it yet."""
    logger = logging.getLogger(name)
    return logger if logger.handlers else setup_logger(name, to_file=False)
