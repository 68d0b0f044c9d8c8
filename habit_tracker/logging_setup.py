from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_PATH_DEFAULT = "logs/habit_tracker.log"


def setup_logging(log_path: str = LOG_PATH_DEFAULT, level: int = logging.INFO) -> logging.Logger:
    """
    Attach a rotating file handler to the package logger (once).
    """
    logger = logging.getLogger("habit_tracker")
    if not logger.handlers:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
