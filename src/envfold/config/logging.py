"""structlog configuration for envfold.

Diagnostics always go to stderr; stdout carries only command results, so
``envfold -q resolve > env.txt`` stays clean. Two renderings:

- console (default): level, logger and event, no timestamps
- JSON lines (``--log-json``): adds an ISO timestamp and formatted tracebacks

Only the ``envfold`` logger follows ``--verbose``; third-party loggers stay
at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog

HANDLER_NAME = "envfold"


def _renderer_chain(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        return [
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and stdlib records to one stderr handler.

    Safe to call more than once per process: the previous envfold handler
    is replaced and other root handlers are left alone.

    Args:
        verbose: DEBUG for ``envfold.*`` (rule application, spans).
            When False, only WARNING and above.
        log_json: Use the JSON renderer instead of the console renderer.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_renderer_chain(log_json),
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("envfold").setLevel(logging.DEBUG if verbose else logging.WARNING)
