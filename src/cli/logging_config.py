"""Structured logging configuration using structlog.

jrnl prints entries on stdout, so every log line goes to stderr. Events below
the configured level are dropped before any processor runs; at the default
WARNING level a normal `put`/`get` logs nothing.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog

# Entry bodies are private; keep them out of logs even at DEBUG
_REDACTED_KEYS = {"contents", "content", "body"}


def _redact_sensitive(_, __, event_dict: dict) -> dict:
    """Structlog processor to mask journal text in log output."""
    for key in _REDACTED_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str):
            event_dict[key] = f"<{len(value)} chars redacted>"
    return event_dict


def _shared_processors(verbose: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if verbose:
        # only worth the frame inspection when debugging
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _redact_sensitive,
    ]
    return processors


def _renderer(json_mode: bool, stream: TextIO) -> structlog.types.Processor:
    if json_mode:
        return structlog.processors.JSONRenderer()
    isatty = getattr(stream, "isatty", None)
    return structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty()))


def setup_logging(
    json_mode: bool = False, level: str = "WARNING", stream: Optional[TextIO] = None
) -> None:
    """Configure structlog and route stdlib logging through the same renderer.

    Args:
        json_mode: One JSON object per log line instead of the console renderer.
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            DEBUG also adds module, function and line to every event.
        stream: Where log lines go; stderr when omitted.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    stream = stream or sys.stderr
    shared = _shared_processors(verbose=log_level <= logging.DEBUG)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    extra: list[structlog.types.Processor] = []
    if json_mode:
        extra.append(structlog.processors.dict_tracebacks)
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *extra,
            _renderer(json_mode, stream),
        ],
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
