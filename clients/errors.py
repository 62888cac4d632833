"""Exceptions raised by the Meraki and PRTG clients."""

from __future__ import annotations

from typing import Optional


class BridgeError(Exception):
    """Base exception for the Meraki to PRTG bridge."""


class ApiError(BridgeError):
    """An upstream HTTP call failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TelemetryApiError(ApiError):
    """Error talking to the Meraki Dashboard API."""


class MonitorApiError(ApiError):
    """Error talking to the PRTG API."""


class ReadingNotFoundError(BridgeError):
    """The device or one of its metrics is missing from a readings response."""
