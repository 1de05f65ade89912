"""
URL helpers for scanned QR payloads and public R2 links.
"""
import re
from typing import List, Optional
from urllib.parse import urlsplit

from qrlink.config import settings
from qrlink.errors import ConfigError

# A URL runs until whitespace, an ASCII delimiter, or full-width CJK punctuation
URL_PATTERN = re.compile(
    r'https?://[^\s<>"{}|\\^`\[\]'
    r'，。！？、；：'
    r'“”‘’【】（）]+',
    re.IGNORECASE
)
TRAILING_PUNCTUATION = re.compile(r'[.,;:!?)]+$')


def extract_all_urls(text: str) -> List[str]:
    """Every http(s) URL in text, trailing sentence punctuation removed."""
    return [TRAILING_PUNCTUATION.sub('', match) for match in URL_PATTERN.findall(text)]


def extract_url(text: str) -> Optional[str]:
    """First URL in text, or None."""
    urls = extract_all_urls(text)
    return urls[0] if urls else None


def public_base_url(domain: str) -> str:
    """Custom domains may be configured with or without a scheme."""
    domain = domain.rstrip('/')
    if domain.startswith('http'):
        return domain
    return f"https://{domain}"


def _public_host() -> Optional[str]:
    if not settings.r2_public_domain:
        return None
    return urlsplit(public_base_url(settings.r2_public_domain)).hostname


def extract_r2_key(url: str) -> Optional[str]:
    """
    Object key of a URL served from the public R2 domain.

    Returns None when no public domain is configured, the URL cannot be
    parsed, or it points at another host.
    """
    host = _public_host()
    if not host:
        return None
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return None
    if hostname != host.lower():
        return None
    return parts.path[1:]


def get_r2_public_url(key: str) -> str:
    """Public URL for an object key."""
    if not settings.r2_public_domain:
        raise ConfigError("R2 public domain not configured")
    return f"{public_base_url(settings.r2_public_domain)}/{key}"
