"""Structured logging configuration using structlog.

Elelem modules log through ``structlog.get_logger(__name__)`` and never
configure logging on import. Applications either call configure_logging()
themselves or let Elelem.from_settings() do it.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Event fields that may carry whole prompts or model responses
LONG_TEXT_FIELDS = ("system_prompt", "user_prompt", "response", "extracted_json", "error")
MAX_FIELD_LENGTH = 1000

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "opentelemetry")


def add_library_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every log event with the library name."""
    event_dict["lib"] = "elelem"
    return event_dict


def truncate_long_text(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Cap prompt/response fields at MAX_FIELD_LENGTH characters."""
    for field in LONG_TEXT_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str) and len(value) > MAX_FIELD_LENGTH:
            event_dict[field] = f"{value[:MAX_FIELD_LENGTH]}... ({len(value)} chars)"
    return event_dict


def _renderer(is_production: bool) -> Processor:
    if is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(log_level: str = "INFO", environment: str = "development") -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: "production" renders JSON lines, anything else the
            colored console format

    Safe to call more than once; the root handler is replaced, not added.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_library_context,
        truncate_long_text,
    ]
    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(is_production),
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )
