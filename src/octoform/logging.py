import logging
from typing import Any

import structlog


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure structlog/standard logging bridge."""

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format="%(message)s")


def bind_context(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Bind contextual fields for downstream logs; ``None`` values are skipped."""

    logger = structlog.get_logger()
    return logger.bind(**{key: value for key, value in kwargs.items() if value is not None})
