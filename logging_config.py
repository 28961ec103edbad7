"""Process-wide logging setup for the service and the CLI."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Iterable, Sequence

from settings import get_settings

# ``extra=`` keys emitted by the pipeline, in display order.
LOAD_CONTEXT_KEYS = (
    "load_seq",
    "source",
    "row_count",
    "nan_cells",
    "health_score",
    "status",
    "processing_ms",
    "reason",
)

_configured = False


def _render_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    text = str(value)
    return f'"{text}"' if " " in text else text


class ContextualFormatter(logging.Formatter):
    """Appends ``key=value`` pairs for the load context attached to a record."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or LOAD_CONTEXT_KEYS)

    def context_of(self, record: logging.LogRecord) -> str:
        return " ".join(
            f"{key}={_render_value(getattr(record, key))}"
            for key in self._extra_keys
            if getattr(record, key, None) is not None
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = self.context_of(record)
        if not context:
            return message
        # The context belongs to the first line, before any traceback.
        head, sep, tail = message.partition("\n")
        return f"{head} | {context}{sep}{tail}"


def configure_logging(level: str | int | None = None, force: bool = False) -> None:
    """Install the contextual stderr handler on the root logger once.

    ``force`` reinstalls it, which the CLI uses when ``--log-level`` is given.
    """
    global _configured
    if _configured and not force:
        return

    log_level = level if level is not None else get_settings().log_level
    if isinstance(log_level, str):
        log_level = log_level.upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "load_context": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)sZ %(levelname)-7s %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "load_context",
                },
            },
            "root": {"handlers": ["stderr"], "level": log_level},
        }
    )
    _configured = True
