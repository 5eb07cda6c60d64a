"""Exception types raised by prtriage_core.

Only PatternError is fatal to the operation that raised it. PartialDataError
is caught at the per-PR fetch boundary and converted into a degraded result,
so callers of the pipeline never see it.
"""

from __future__ import annotations


class PrTriageError(Exception):
    """Base class for all prtriage errors."""


class PatternError(PrTriageError):
    """A CODEOWNERS pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid ownership pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class PartialDataError(PrTriageError):
    """Fetching files, comments or reviews for a single PR failed."""

    def __init__(self, pr_number: int, what: str, cause: Exception | None = None):
        super().__init__(f"Could not fetch {what} for PR #{pr_number}: {cause}")
        self.pr_number = pr_number
        self.what = what
        self.cause = cause


class ConfigError(PrTriageError):
    """The configuration file holds a value prtriage cannot use."""
