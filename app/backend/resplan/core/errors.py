"""Error kinds raised by the dashboard core."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for dashboard core errors."""


class RemoteUnavailable(DashboardError):
    """Remote tier is unconfigured, unreachable, or returned undecodable rows."""


class CacheCorrupt(DashboardError):
    """Local snapshot exists but cannot be decoded."""


class ValidationFailed(DashboardError):
    """Create/edit input is missing a required field or holds an invalid value."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail
