"""
Custom exceptions for the Ardour EmmyLua scraper.

Error severity:
  - StructureError → FAIL HARD: the page no longer matches the markup the
    extractor understands (missing members table, malformed "is-a:" line,
    malformed enum list, duplicate class name). The run aborts.
  - FetchError     → FAIL HARD: the reference page could not be downloaded.
  - OverrideError  → FAIL HARD: a documentation override file is unreadable.

Soft anomalies (an unfamiliar result-discussion shape, a malformed
parameter index) are not exceptions: the extractor logs them, records them in
ExtractionResult.warnings and carries on.
"""

from typing import Optional


class ScraperError(Exception):
    """Base exception for all scraper errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StructureError(ScraperError):
    """
    Raised when the reference markup violates an extraction assumption.

    Carries the offending element id (when known) in details["element"].
    """

    def __init__(
        self,
        message: str,
        element: Optional[str] = None,
        details: Optional[dict] = None
    ):
        details = dict(details or {})
        if element is not None:
            details["element"] = element
        super().__init__(message, details)
        self.element = element


class FetchError(ScraperError):
    """Raised when the reference page cannot be downloaded."""

    def __init__(
        self,
        message: str,
        url: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.url = url


class OverrideError(ScraperError):
    """Raised when a documentation override file cannot be loaded."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.path = path
