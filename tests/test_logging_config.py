import logging
import sys

import pytest

import logging_config
from logging_config import ContextualFormatter
from settings import get_settings


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.pipeline",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Loaded telemetry",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    message = formatter.format(_record(load_seq=3, row_count=16, unrelated="x"))

    assert message == "INFO Loaded telemetry | load_seq=3 row_count=16"


def test_formatter_without_context_is_unchanged() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record()) == "Loaded telemetry"


def test_formatter_honours_custom_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["source"])

    message = formatter.format(_record(source="battery.csv", load_seq=1))

    assert message == "Loaded telemetry | source=battery.csv"


def test_floats_render_compactly_and_spaced_text_is_quoted() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(
        _record(health_score=94.61234, processing_ms=0.5, reason="file not found")
    )

    assert message == 'Loaded telemetry | health_score=94.6123 processing_ms=0.5 reason="file not found"'


def test_context_goes_before_the_traceback() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")
    try:
        raise OSError("boom")
    except OSError:
        record = _record(load_seq=2)
        record.exc_info = sys.exc_info()

    first_line, _, rest = formatter.format(record).partition("\n")

    assert first_line == "Loaded telemetry | load_seq=2"
    assert rest.startswith("Traceback")


@pytest.fixture()
def root_logger(monkeypatch):
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    monkeypatch.setattr(logging_config, "_configured", False)
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_installs_once_unless_forced(root_logger, monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")
    get_settings.cache_clear()
    try:
        logging_config.configure_logging()
        assert root_logger.level == logging.WARNING
        assert any(isinstance(h.formatter, ContextualFormatter) for h in root_logger.handlers)

        logging_config.configure_logging("debug")
        assert root_logger.level == logging.WARNING

        logging_config.configure_logging("debug", force=True)
        assert root_logger.level == logging.DEBUG
    finally:
        get_settings.cache_clear()
