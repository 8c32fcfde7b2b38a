# -*- coding: utf-8 -*-
import logging

from app.shared.config.logging_config import setup_logging


def test_setup_logging_plain():
    setup_logging(level="DEBUG", fmt="plain")
    logger = logging.getLogger("test_plain")
    # No debe fallar emitir logs
    logger.debug("hello plain")
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


def test_setup_logging_json():
    setup_logging(level="INFO", fmt="json")
    logging.getLogger("test_json").info("hello json")
    formatters = [h.formatter for h in logging.getLogger().handlers if h.formatter is not None]
    assert any(f.__class__.__module__.startswith("pythonjsonlogger") for f in formatters), (
        "Se esperaba JsonFormatter activo en modo json"
    )


def test_noisy_loggers_are_quieted():
    setup_logging(level="DEBUG", fmt="plain")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
# Fin del archivo backend/tests/shared/config/test_logging_config.py
