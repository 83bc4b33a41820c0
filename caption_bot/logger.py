from __future__ import annotations

import logging
import os
from typing import Optional

ROOT_LOGGER_NAME = "caption_bot"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root handler; ``level`` falls back to ``LOG_LEVEL``."""
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    # discord.py is chatty at INFO.
    logging.getLogger("discord").setLevel(max(resolved, logging.WARNING))
