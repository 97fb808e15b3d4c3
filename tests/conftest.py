"""Shared test fixtures and configuration for Beacon Inspector tests."""

import pytest
from pathlib import Path
import sys

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from beacon_inspector.providers import (
    AdobeAnalyticsProvider,
    AdobeTargetProvider,
    ProviderRegistry,
    build_default_registry
)


ADOBE_LINK_URL = (
    "https://x/b/ss/mysite/?pe=lnk_o&pev2=Example%20Link&c1=foo&v1=bar&AQB=1"
)

GA4_URL = (
    "https://region1.google-analytics.com/g/collect"
    "?v=2&tid=G-ABCDEF1234&cid=123.456&en=page_view&dl=https%3A%2F%2Fexample.com%2F"
    "&ep.page_type=home&epn.value=10&up.tier=gold"
)

GTM_URL = "https://www.googletagmanager.com/gtm.js?id=GTM-ABC1234&l=dataLayer"


@pytest.fixture
def registry() -> ProviderRegistry:
    """Fresh registry with the built-in providers."""
    return build_default_registry()


@pytest.fixture
def adobe_registry() -> ProviderRegistry:
    """Registry holding only the Adobe providers."""
    return ProviderRegistry([AdobeAnalyticsProvider(), AdobeTargetProvider()])


@pytest.fixture
def temp_url_file(tmp_path):
    """File of captured request URLs for scan tests."""
    content = "\n".join([
        "# Captured requests",
        ADOBE_LINK_URL,
        "https://www.example.com/app.js",
        "",
        GTM_URL,
        GA4_URL,
    ])
    path = tmp_path / "requests.txt"
    path.write_text(content)
    return path
