"""
Error taxonomy shared by the storage layer, services and endpoints.

Each error carries the HTTP status it maps to. Client errors (4xx) return
their message to the caller; server errors (5xx) are logged and replaced
with a generic message by the handlers in qrlink.main.
"""


class QRLinkError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(QRLinkError):
    """Malformed or out-of-range input."""
    status_code = 400


class AuthError(QRLinkError):
    """Missing or incorrect access password."""
    status_code = 401


class NotFoundError(QRLinkError):
    """Unknown short code or storage object."""
    status_code = 404


class ConfigError(QRLinkError):
    """Provider credentials or namespace not configured."""
    status_code = 500


class UpstreamError(QRLinkError):
    """Non-2xx or failed call to the storage/KV provider."""
    status_code = 500


class StoreError(UpstreamError):
    """Key-value store read or write failed."""
