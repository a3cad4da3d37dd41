"""Structured logging setup for icanhazlb (structlog over stdlib logging)."""

import logging
import os
import sys
from typing import Any, Optional, TextIO

import structlog


def setup_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> None:
    """Configure stdlib logging and structlog for the process.

    Args:
        verbose: Force DEBUG level, ignoring the LOG_LEVEL environment variable
        stream: Where log lines go (default: stdout)
    """
    log_level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        log_level, numeric_level = "INFO", logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=numeric_level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _get_renderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).info("Logging configured", log_level=log_level, verbose=verbose)


def _get_renderer() -> Any:
    """JSON lines when LOG_FORMAT=json, colored console output otherwise."""
    if os.getenv("LOG_FORMAT", "console").lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.plain_traceback,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger bound to ``name``."""
    return structlog.get_logger(name)


def log_function_entry(logger: structlog.stdlib.BoundLogger, func_name: str, **kwargs: Any) -> None:
    logger.debug("Function entry", function=func_name, **kwargs)


def log_function_exit(logger: structlog.stdlib.BoundLogger, func_name: str, **kwargs: Any) -> None:
    logger.debug("Function exit", function=func_name, **kwargs)


def log_api_request(logger: structlog.stdlib.BoundLogger, method: str, host: str, path: str, **kwargs: Any) -> None:
    """Log an inbound HTTP request.

    Args:
        logger: The logger instance
        method: HTTP method
        host: Host header the request was addressed to
        path: Request path
        **kwargs: Additional request details
    """
    logger.info("API request", method=method, host=host, path=path, **kwargs)


def log_api_response(logger: structlog.stdlib.BoundLogger, method: str, path: str, status_code: int, **kwargs: Any) -> None:
    """Log the response sent for an inbound HTTP request.

    Args:
        logger: The logger instance
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        **kwargs: Additional response details
    """
    logger.info("API response", method=method, path=path, status_code=status_code, **kwargs)


def log_k8s_operation(logger: structlog.stdlib.BoundLogger, operation: str, **kwargs: Any) -> None:
    """Log a call made against the Kubernetes API server.

    Args:
        logger: The logger instance
        operation: Kind of operation (connect, create, ...)
        **kwargs: Operation details such as group, plural, namespace, name
    """
    logger.debug("Kubernetes operation", operation=operation, **kwargs)


def log_provision_event(logger: structlog.stdlib.BoundLogger, event_type: str, **kwargs: Any) -> None:
    """Log a provisioning lifecycle event (resolved, submitted, rejected...).

    Args:
        logger: The logger instance
        event_type: Type of provisioning event
        **kwargs: Event details
    """
    logger.info("Provision event", event_type=event_type, **kwargs)
