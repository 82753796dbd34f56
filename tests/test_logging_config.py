import logging

from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer

from core.config import Settings
from core.logging_config import _resolve_level, get_renderer


def test_json_renderer_outside_debug():
    assert isinstance(get_renderer(Settings(DEBUG=False)), JSONRenderer)


def test_console_renderer_in_debug():
    assert isinstance(get_renderer(Settings(DEBUG=True)), ConsoleRenderer)


def test_log_level_override_wins_over_debug():
    assert _resolve_level(Settings(DEBUG=True, LOG_LEVEL="warning")) == logging.WARNING


def test_unknown_log_level_falls_back_to_debug_flag():
    assert _resolve_level(Settings(DEBUG=False, LOG_LEVEL="chatty")) == logging.INFO
