"""structlog configuration shared by the web service and the CLI.

One processor chain renders both structlog events and records from the
standard library (uvicorn, httpx), either as coloured console lines or, in
production, as JSON.  Request- and upload-scoped values bound with
:func:`bind_log_context` are merged into every event logged from the same
task.
"""

import logging
import sys
from typing import Any

import structlog

# Libraries that log each outbound request at INFO; one embedding call per
# chunk would flood the output.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _route_stdlib_logging(level: str, chain: list[structlog.types.Processor]) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *chain],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    quiet_level = max(logging.WARNING, logging.getLevelName(level))
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Install the processor chain for structlog and stdlib logging.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR (case-insensitive).
        json_output: Render JSON lines; ``main`` enables this when
            ``APP_ENV=production``.

    Returns:
        A logger bound to no particular module.
    """
    level = log_level.upper()
    chain = [*_shared_processors(), _renderer(json_output)]

    structlog.configure(
        processors=chain,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _route_stdlib_logging(level, chain)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger tagged with *name*, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


def bind_log_context(**values: Any) -> None:
    """Attach *values* to every event logged from the current task."""
    structlog.contextvars.bind_contextvars(**values)


def clear_log_context(*keys: str) -> None:
    """Remove *keys* bound with :func:`bind_log_context`."""
    structlog.contextvars.unbind_contextvars(*keys)
