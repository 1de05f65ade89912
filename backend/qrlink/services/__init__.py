"""
Business logic services.
"""
from qrlink.services.shortlink_service import ShortLinkService, get_short_link_service
from qrlink.services.scan_service import ScanService, get_scan_service

__all__ = [
    "ShortLinkService",
    "get_short_link_service",
    "ScanService",
    "get_scan_service",
]
