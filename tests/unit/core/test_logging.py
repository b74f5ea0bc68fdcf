import structlog

from src.core.logging import configure_logging


def test_configure_logging_uses_json_renderer():
    configure_logging(log_level="debug", json_logs=True)

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_console_renderer_outside_json_mode():
    configure_logging(log_level="INFO", json_logs=False)

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
