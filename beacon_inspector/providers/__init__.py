"""Beacon provider framework.

This module provides the decoder protocol, data models, the provider
registry and the vendor-specific decoders. The default registry is built
explicitly from ``default_providers()``; nothing is registered as an import
side effect.
"""

from functools import lru_cache
from typing import List

from .base import (
    ParamDecoder,
    BaseProvider,
    UnknownProvider,
    ProviderType,
    ProviderDescriptor,
    ParamDefinition,
    DecodedField,
    ProviderInfo,
    ParsedBeacon,
    build_parameter_table,
    lookup_param,
    decode_beacon
)
from .registry import ProviderRegistry

# Import provider implementations
from .adobe_analytics import AdobeAnalyticsProvider
from .adobe_target import AdobeTargetProvider
from .google import GA4Provider, GTMProvider

# Import configuration system
from .config import DecoderConfig, ConfigManager, load_config


def default_providers() -> List[ParamDecoder]:
    """Create the built-in providers in dispatch order."""
    return [
        AdobeAnalyticsProvider(),
        AdobeTargetProvider(),
        GA4Provider(),
        GTMProvider(),
    ]


def build_default_registry() -> ProviderRegistry:
    """Build a registry holding the built-in providers."""
    return ProviderRegistry(default_providers())


@lru_cache(maxsize=1)
def get_default_registry() -> ProviderRegistry:
    """Get a shared registry of the built-in providers."""
    return build_default_registry()


__all__ = [
    # Base framework
    "ParamDecoder",
    "BaseProvider",
    "UnknownProvider",
    "ProviderType",
    "ProviderDescriptor",
    "ParamDefinition",
    "DecodedField",
    "ProviderInfo",
    "ParsedBeacon",
    "build_parameter_table",
    "lookup_param",
    "decode_beacon",
    "ProviderRegistry",

    # Provider implementations
    "AdobeAnalyticsProvider",
    "AdobeTargetProvider",
    "GA4Provider",
    "GTMProvider",

    # Registry construction
    "default_providers",
    "build_default_registry",
    "get_default_registry",

    # Configuration system
    "DecoderConfig",
    "ConfigManager",
    "load_config",
]
