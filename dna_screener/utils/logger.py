# dna_screener/utils/logger.py

"""
Structured Logging Configuration (structlog).

Provides a centralized logger for the screening pipeline. Logs go to
stderr so stdout stays free for the event stream printed by the CLI.
Rendering is colored key-value output on a terminal, JSON otherwise.
"""

import sys
import logging

import structlog

from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.processors import EventRenamer, StackInfoRenderer, dict_tracebacks
from structlog.stdlib import add_log_level, add_logger_name

from config.settings import get_settings


def key_stripper(keys):
    def processor(logger, method_name, event_dict):
        for key in keys:
            event_dict.pop(key, None)
        return event_dict
    return processor

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

def configure_logging():
    """
    Configures structlog from the log level and log format settings.
    """
    settings = get_settings()

    use_console = settings.log_format == "text" or sys.stderr.isatty()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        add_logger_name,
        add_log_level,
        StackInfoRenderer(),
        CallsiteParameterAdder(parameters=[
            CallsiteParameter.MODULE,
            CallsiteParameter.LINENO,
            CallsiteParameter.FUNC_NAME,
        ]),
        key_stripper(keys=["_record", "_from_structlog"]),
    ]

    if use_console:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty(), sort_keys=True)
        ]
    else:
        processors = shared_processors + [
            EventRenamer("message"),
            dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]

    # Standard logging carries LangChain / httpx / urllib3 records
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=settings.log_level,
    )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Returns a configured structlog logger instance.

    Args:
        name: The name of the logger (e.g., the component name).
    """
    global _logging_configured
    if not _logging_configured:
        configure_logging()
        _logging_configured = True

    return structlog.get_logger(name)


_logging_configured = False
