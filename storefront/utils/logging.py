"""
Centralized, idempotent logging configuration.
Import anywhere; configures each app only once.
"""
import logging
import logging.handlers
import os
from typing import Optional

from flask import Flask, current_app, has_app_context

from storefront.config import DEFAULT_LOG_LEVEL, DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATEFMT


ROOT_LOGGER_NAME = "storefront"


def setup_logging(app: Flask) -> None:
    """
    Configure the storefront logger tree + Flask app logger.
    Safe to call multiple times (e.g. one app per test).
    """
    if app.extensions.get("storefront_logging"):
        return

    if app.debug:
        level = logging.DEBUG
    else:
        level_name = app.config.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        app.config.get("LOG_FORMAT", DEFAULT_LOG_FORMAT),
        datefmt=app.config.get("LOG_DATEFMT", DEFAULT_LOG_DATEFMT),
    )

    base = logging.getLogger(ROOT_LOGGER_NAME)
    base.handlers.clear()
    base.setLevel(level)
    base.propagate = False

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    base.addHandler(console)

    log_file = app.config.get("LOG_FILE")
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,   # 10 MB
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            base.addHandler(file_handler)
            base.info("File logging → %s", log_file)
        except OSError as exc:  # Never crash on logging failure
            base.warning("Failed to initialize file logging (%s): %s", log_file, exc)

    app.logger.propagate = False
    app.logger.handlers = base.handlers[:]
    app.logger.setLevel(level)

    app.extensions["storefront_logging"] = True
    base.info("Logging initialized (level=%s)", logging.getLevelName(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Preferred way: log = get_logger(__name__)
    Every logger hangs off the 'storefront' tree so one setup covers all of them.
    """
    if not name or name == "__main__":
        if has_app_context():
            return current_app.logger
        return logging.getLogger(ROOT_LOGGER_NAME)

    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(ROOT_LOGGER_NAME).getChild(name.split(".")[-1])
