# -*- coding: utf-8 -*-
"""
Logging for Aurora Gold.

Every module logger hangs under the ``aurora`` root, which owns the only
stdout handler. ``get_logger("aurora_gold.pricing.service")`` → ``aurora.pricing.service``.
"""
import logging, sys
from aurora_gold.config import settings

ROOT_LOGGER = "aurora"
LOG_FORMAT  = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)
        level = "DEBUG" if settings.debug else settings.log_level.upper()
        root.setLevel(getattr(logging, level, logging.INFO))
        root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    _root()
    short = name.split(".", 1)[1] if name.startswith("aurora_gold.") else name
    return logging.getLogger(f"{ROOT_LOGGER}.{short}")
