"""
utils/logger.py
-----------------
Logging setup for the "sevak" logger namespace.

Two daily-rotated files are written under LOG_DIR:
    sevak-YYYY-MM-DD.log        info and above
    errors/sevak-error-...log   errors only
A console handler is added when the app runs in debug mode.
"""

import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler
from flask import g, request

ROOT_LOGGER = "sevak"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def get_logger(name=None):
    base = logging.getLogger(ROOT_LOGGER)
    return base.getChild(name) if name else base


def _rotating_handler(path, level):
    handler = TimedRotatingFileHandler(path, when="midnight", backupCount=14, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def init_logging(app):
    logger = get_logger()
    logger.setLevel(getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO))

    # create_app() may run more than once per process (tests)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        error_dir = os.path.join(log_dir, "errors")
        os.makedirs(error_dir, exist_ok=True)

        logger.addHandler(_rotating_handler(os.path.join(log_dir, "sevak.log"), logging.INFO))
        logger.addHandler(_rotating_handler(os.path.join(error_dir, "sevak-error.log"), logging.ERROR))

    if app.debug:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    _register_request_logging(app)
    return logger


def _register_request_logging(app):
    access_log = get_logger("http")

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.get("request_started")
        elapsed = (time.perf_counter() - started) * 1000 if started else 0.0
        access_log.info("%s %s %s %.1fms", request.method, request.path, response.status_code, elapsed)
        return response
