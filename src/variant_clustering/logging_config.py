"""structlog + stdlib logging configuration for the clustering jobs.

Both ``structlog.get_logger()`` and plain ``logging.getLogger(__name__)``
calls (SQLAlchemy, alembic) end up in the same handler, rendered either as
JSON lines (production runs) or coloured console output (development).
"""

import logging
import sys

import structlog

# Third-party loggers that are far too chatty at INFO during bulk writes.
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def configure_logging(json_output: bool = True, log_level: str = "INFO") -> None:
    """Configure unified logging for structlog and stdlib.

    Args:
        json_output: Render JSON lines when ``True``, otherwise use
            structlog's console renderer.
        log_level: Root log level name (``"DEBUG"``, ``"INFO"``, ...).
    """
    level = getattr(logging, log_level.upper())
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
