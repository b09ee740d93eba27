from __future__ import annotations

import logging
from dataclasses import replace

from bookings.utils import logger as logger_module
from bookings.utils.config import get_settings


def test_log_format_is_tagged_with_app_name():
    settings = replace(get_settings(), app_name="Fort Smythe Bookings")

    log_format = logger_module.build_log_format(settings)

    assert "| Fort Smythe Bookings |" in log_format
    assert log_format.endswith("%(name)s | %(message)s")


def test_configure_logging_runs_once_and_quiets_form_parser(monkeypatch):
    calls: list[dict] = []
    monkeypatch.setattr(logger_module, "_LOGGER_INITIALIZED", False)
    monkeypatch.setattr(logger_module.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(logging.getLogger("multipart"), "level", logging.NOTSET)

    logger_module.configure_logging("debug")
    logger_module.configure_logging("info")

    assert len(calls) == 1
    assert calls[0]["level"] == "DEBUG"
    assert calls[0]["format"] == logger_module.build_log_format(get_settings())
    assert logging.getLogger("multipart").level == logging.WARNING
