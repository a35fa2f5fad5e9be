"""
Structured logging for the storefront
"""
import logging
import sys
import structlog


# Third-party loggers that only matter when something is wrong
QUIET_LOGGERS = ("werkzeug", "urllib3")


def configure_logging(service_name: str, log_level: str = "INFO", json_logs: bool = True) -> structlog.BoundLogger:
    """
    Route structlog events to stdout, one line per event
    
    Args:
        service_name: Bound into every event as ``service``
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        json_logs: JSON lines when True, human-readable console output otherwise
    
    Returns:
        Logger for the caller
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer()]
    
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )
    
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)
    return structlog.get_logger()
