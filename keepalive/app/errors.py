"""Failure categories of a keep-alive run.

None of these ever escape a component: they are raised and caught at the
point of failure and turned into a log message plus a flag for the caller.
"""

from typing import Optional


class KeepAliveError(Exception):
    category = "error"


class ConfigurationMissing(KeepAliveError):
    """No API token configured; the primary check cannot run."""

    category = "configuration_missing"


class PrimaryCheckFailed(KeepAliveError):
    """The authenticated status request failed or returned non-2xx."""

    category = "primary_check_failed"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SecondaryCheckFailed(KeepAliveError):
    """The optional application ping failed. Advisory only."""

    category = "secondary_check_failed"


class HistoryBackingUnavailable(KeepAliveError):
    """The key-value store behind the history log could not be used."""

    category = "history_backing_unavailable"
