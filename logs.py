from __future__ import annotations

import logging
import os

_LOGGED_EVENTS: set[str] = set()


def debug_enabled() -> bool:
    return os.environ.get("BOSPLAN_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(f"%(asctime)s [{name}] %(levelname)s: %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)
    return logger


def log_once(logger: logging.Logger, key: str, level: int, message: str) -> None:
    if key in _LOGGED_EVENTS:
        return
    logger.log(level, message)
    _LOGGED_EVENTS.add(key)
