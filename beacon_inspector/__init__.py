"""Beacon Inspector - decode analytics and marketing tag beacons."""

from .errors import BeaconInspectorError, ConfigurationError, UrlParseError
from .providers import (
    ParsedBeacon,
    DecodedField,
    ProviderRegistry,
    build_default_registry,
    get_default_registry
)

__version__ = "1.0.0"


def decode(url: str, post_data: str = "") -> ParsedBeacon:
    """Decode a beacon with the built-in providers."""
    return get_default_registry().decode(url, post_data)


__all__ = [
    "__version__",
    "decode",
    "BeaconInspectorError",
    "ConfigurationError",
    "UrlParseError",
    "ParsedBeacon",
    "DecodedField",
    "ProviderRegistry",
    "build_default_registry",
    "get_default_registry",
]
