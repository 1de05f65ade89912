"""
FastAPI dependencies for authentication.

The whole app shares one access password (ACCESS_PASSWORD), sent by the
browser in the x-access-password header. With no password configured every
check passes.
"""
import hmac
from typing import Optional

from fastapi import Header

from qrlink.config import settings
from qrlink.errors import AuthError


def check_access_password(provided: Optional[str]) -> None:
    """
    Compare the provided header value against the configured password.

    Raises:
        AuthError: password configured and header missing or different
    """
    expected = settings.access_password
    if not expected:
        return

    if provided is None or not hmac.compare_digest(
        provided.encode("utf-8"), expected.encode("utf-8")
    ):
        raise AuthError("Unauthorized: Invalid Password")


async def require_access_password(
    x_access_password: Optional[str] = Header(None)
) -> None:
    """
    FastAPI dependency guarding write endpoints.

    Raises:
        AuthError 401: If the password is missing or wrong
    """
    check_access_password(x_access_password)
