"""Registry for beacon providers and URL dispatch."""

import logging
from typing import Dict, Iterable, List, Optional, Pattern

from .base import ParamDecoder, ParsedBeacon, UnknownProvider
from .utils import NEVER_MATCH, combine_patterns


logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Ordered collection of beacon providers.

    Registration order decides dispatch precedence: the first provider whose
    pattern matches a URL decodes it. Providers are registered once at
    startup; afterwards the registry is only read, so it can be shared
    between threads.
    """

    def __init__(self, providers: Optional[Iterable[ParamDecoder]] = None):
        self._providers: Dict[str, ParamDecoder] = {}
        self._patterns: List[Pattern[str]] = []
        self._combined: Pattern[str] = NEVER_MATCH
        self._unknown = UnknownProvider()

        if providers is not None:
            self.register_all(providers)

    def register(self, provider: ParamDecoder) -> None:
        """Register a provider.

        Registering a key that already exists replaces the earlier provider
        in place.

        Args:
            provider: Provider to register
        """
        key = provider.key
        if key in self._providers:
            logger.warning("Provider %s is already registered; replacing it", key)

        self._providers[key] = provider
        self._patterns = [registered.descriptor.pattern for registered in self._providers.values()]
        self._combined = combine_patterns(self._patterns)

        logger.debug("Registered provider %s (%s)", key, provider.descriptor.name)

    def register_all(self, providers: Iterable[ParamDecoder]) -> "ProviderRegistry":
        """Register providers in order and return the registry."""
        for provider in providers:
            self.register(provider)
        return self

    def get_provider(self, key: str) -> Optional[ParamDecoder]:
        """Get a registered provider by key."""
        return self._providers.get(key)

    def get_providers(self) -> Dict[str, ParamDecoder]:
        """Get all registered providers keyed by provider key, in order."""
        return dict(self._providers)

    def list_providers(self) -> List[str]:
        """List registered provider keys in registration order."""
        return list(self._providers.keys())

    @property
    def unknown_provider(self) -> ParamDecoder:
        """Provider returned when nothing matches."""
        return self._unknown

    def find_provider_for_url(self, url: str) -> ParamDecoder:
        """Return the first registered provider matching the URL.

        Args:
            url: Raw beacon URL

        Returns:
            Matching provider, or the unknown provider if none match
        """
        for provider in self._providers.values():
            if provider.matches(url):
                return provider

        logger.debug("No provider matches %s", url)
        return self._unknown

    def quick_match(self, url: str) -> bool:
        """Check if any registered provider is interested in the URL."""
        return self._combined.search(url) is not None

    def decode(self, url: str, post_data: Optional[str] = "") -> ParsedBeacon:
        """Decode a beacon with whichever provider matches it.

        Args:
            url: Absolute beacon URL
            post_data: Form-encoded request body, if any

        Returns:
            Decoded beacon; an unknown-provider beacon with no data when
            nothing matches

        Raises:
            UrlParseError: If the URL cannot be parsed
        """
        return self.find_provider_for_url(url).decode(url, post_data)

    def build_pattern(self, keys: Optional[Iterable[str]] = None) -> Pattern[str]:
        """Build a pattern matching the URLs of the given providers.

        Args:
            keys: Provider keys to include; all providers when empty or None.
                Unknown keys are ignored.

        Returns:
            Combined pattern; never matches if no requested key is registered
        """
        keys = list(keys) if keys else []
        if not keys:
            return self._combined

        patterns = []
        for key in keys:
            provider = self._providers.get(key)
            if provider is None:
                logger.debug("Ignoring unknown provider key %s", key)
                continue
            patterns.append(provider.descriptor.pattern)

        return combine_patterns(patterns)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, key: object) -> bool:
        return key in self._providers

    def __iter__(self):
        return iter(self._providers.values())
