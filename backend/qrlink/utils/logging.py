"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- code
- key
- action
- duration_ms

Usage:
    from qrlink.utils.logging import configure_logging, log_short_link_created

    configure_logging('qrlink-api', 'INFO')
    log_short_link_created(logger, code='aB3xY9', link_type='url')

Stored content, presigned URLs and passwords are never logged.
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (e.g. qrlink-api)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    code: Optional[str] = None,
    key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        code: Optional short code
        key: Optional storage object key
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if code:
        extra["code"] = code
    if key:
        extra["key"] = key
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


# Short link event functions

def log_short_link_created(
    logger: logging.Logger,
    code: str,
    link_type: str,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log short link creation event.

    Args:
        logger: Logger instance
        code: Short code (required)
        link_type: "url" or "text" (required)
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="short_link_created",
        code=code,
        duration_ms=duration_ms,
        link_type=link_type,
        **kwargs
    )

    logger.info(f"Short link created: {code}", extra=extra)


def log_short_link_resolved(
    logger: logging.Logger,
    code: str,
    found: bool,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log short link lookup with its outcome."""
    extra = _build_log_extra(
        event="short_link_resolved",
        code=code,
        duration_ms=duration_ms,
        found=found,
        **kwargs
    )

    logger.info(f"Short link resolved: {code} (found={found})", extra=extra)


# Storage event functions

def log_presign_issued(
    logger: logging.Logger,
    action: str,
    key: str,
    expires_in: Optional[int] = None,
    **kwargs
):
    """
    Log presigned URL issuance.

    Args:
        logger: Logger instance
        action: "put" or "get" (required)
        key: Object key (required)
        expires_in: URL lifetime in seconds, None for public URLs
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="presign_issued",
        key=key,
        action=action,
        **kwargs
    )
    if expires_in is not None:
        extra["expires_in"] = expires_in

    logger.info(f"Presigned {action} URL issued: {key}", extra=extra)


def log_upstream_failure(
    logger: logging.Logger,
    service: str,
    operation: str,
    error: str,
    status_code: Optional[int] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log a failed call to the storage or KV provider.

    Args:
        logger: Logger instance
        service: Provider name ("r2" or "kv") (required)
        operation: Operation name (required)
        error: Error message (required)
        status_code: Provider HTTP status, when there is one
        include_traceback: Whether to include stack trace
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upstream_failure",
        service_name=service,
        operation=operation,
        error=str(error),
        **kwargs
    )
    if status_code is not None:
        extra["status_code"] = status_code

    message = f"Upstream failure: {service}.{operation} - {error}"

    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
            return
    logger.error(message, extra=extra)


# Convenience alias for backward compatibility
def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
