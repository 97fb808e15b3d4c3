"""Exception hierarchy for beacon decoding.

Decoding is deliberately forgiving: unknown parameters, unmatched URLs and
unbalanced context-data markers are not errors. Only input the decoder cannot
interpret at all (an unparseable URL, a broken configuration) raises.
"""

from typing import Optional


class BeaconInspectorError(Exception):
    """Base class for all beacon inspector errors."""
    pass


class UrlParseError(BeaconInspectorError, ValueError):
    """Raised when a beacon URL cannot be parsed as an absolute URL."""
    
    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"Cannot parse beacon URL: {url!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigurationError(BeaconInspectorError):
    """Configuration-related errors."""
    pass
