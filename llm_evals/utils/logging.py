"""Diagnostic logging for llm_evals.

Progress and reports go to stdout with ``print``; this logger carries the
side channel: skipped rows, retry attempts, failed records and count
mismatches. Set ``LLM_EVALS_LOG_LEVEL`` (e.g. ``DEBUG``) to see skipped rows.
"""

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "LLM_EVALS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level_from_env() -> int:
    level = logging.getLevelName((os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper())
    # unknown names come back as "Level X"
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Module logger with one stderr handler, attached on first use."""
    logger = logging.getLogger(name or "llm_evals")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_level_from_env())
    return logger
