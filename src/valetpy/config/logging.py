"""structlog configuration for valetpy.

Stdlib loggers (valetpy's own modules, hypercorn) and structlog loggers
share one processor chain and one stderr handler. Two output modes:
- Human (default): colored console output
- JSON (--log-json): one JSON object per line, tracebacks as strings

The web harness binds ``host`` and ``uri`` into structlog contextvars for
the lifetime of each request; ``merge_contextvars`` copies them onto every
event logged while that request is in flight.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

REQUEST_FIELDS = ("host", "uri")
MAX_FIELD_LENGTH = 200


def clip_request_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Shorten bound request fields.

    Pretty URLs routinely carry reset tokens or JWTs several hundred
    characters long; the clipped value keeps the prefix and notes how
    much was dropped.
    """
    for key in REQUEST_FIELDS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_FIELD_LENGTH:
            dropped = len(value) - MAX_FIELD_LENGTH
            event_dict[key] = f"{value[:MAX_FIELD_LENGTH]}...(+{dropped} chars)"
    return event_dict


def logger_levels(*, verbose: bool) -> dict[str, int]:
    """Levels for the loggers valetpy cares about. The root stays at WARNING."""
    return {
        "valetpy": logging.DEBUG if verbose else logging.INFO,
        # Startup banner and worker errors.
        "hypercorn.error": logging.INFO,
        # One line per request; the harness already logs "Handled request".
        "hypercorn.access": logging.INFO if verbose else logging.WARNING,
    }


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Safe to call more than once: the root handler is replaced, not added.

    Args:
        verbose: DEBUG for valetpy and hypercorn access lines. Otherwise INFO.
        log_json: Use JSON renderer instead of console renderer.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        clip_request_fields,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    render_chain: list[structlog.types.Processor]
    if log_json:
        render_chain = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer prints exc_info itself.
        render_chain = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render_chain],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    for name, level in logger_levels(verbose=verbose).items():
        logging.getLogger(name).setLevel(level)
