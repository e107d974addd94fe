"""
Centralized logging configuration for codex-merge.

Every module asks ``get_logger("<component>")`` for a child of the shared
``codex_merge`` logger. Only the base logger owns handlers: one master log
file (rotated when ``logging.rotate`` is set) and the console. Children
carry no level of their own, so ``set_debug`` switches the whole tree.
"""

from __future__ import annotations

import logging
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path

from codex_merge.config import get_config
from codex_merge.utils.pathing import project_root

BASE_LOGGER_NAME = "codex_merge"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_base_configured: bool = False


def _log_dir() -> Path:
    cfg = get_config()
    log_dir = Path(cfg.logging.get("dir") or cfg.paths.get("logs_dir") or "logs")
    if not log_dir.is_absolute():
        log_dir = project_root() / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _master_handler(path: Path, rotate: bool) -> logging.Handler:
    if rotate:
        return RotatingFileHandler(
            path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
    return logging.FileHandler(path, encoding="utf-8")


def _configure_base_logger() -> Logger:
    global _base_configured

    base_logger = logging.getLogger(BASE_LOGGER_NAME)
    if _base_configured:
        return base_logger

    cfg = get_config()
    level_name = str(cfg.logging.get("level", "INFO")).upper()
    level = logging.DEBUG if cfg.debug else getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [
        _master_handler(
            _log_dir() / cfg.logging.get("file", "codex_merge.log"),
            bool(cfg.logging.get("rotate", False)),
        ),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        base_logger.addHandler(handler)

    base_logger.setLevel(level)
    base_logger.propagate = False
    _base_configured = True
    return base_logger


def get_logger(name: str | None = None) -> Logger:
    """Return ``codex_merge.<name>``, or the base logger itself for no name."""
    base_logger = _configure_base_logger()
    if not name or name == BASE_LOGGER_NAME:
        return base_logger
    if not name.startswith(BASE_LOGGER_NAME + "."):
        name = f"{BASE_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_debug(enabled: bool) -> None:
    """Switch the base logger and its handlers to DEBUG, or back to INFO."""
    base_logger = _configure_base_logger()
    level = logging.DEBUG if enabled else logging.INFO
    base_logger.setLevel(level)
    for handler in base_logger.handlers:
        handler.setLevel(level)
