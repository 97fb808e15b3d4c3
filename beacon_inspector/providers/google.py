"""Google Analytics 4 and Google Tag Manager decoders."""

import re
from typing import Optional

from .base import BaseProvider, DecodedField, ProviderType, lookup_param


GA4_PARAMETERS = {
    "v": {"name": "Protocol version", "group": "General"},
    "tid": {"name": "Measurement ID", "group": "General"},
    "gtm": {"name": "GTM hash", "group": "General"},
    "_p": {"name": "Page load hash", "group": "General"},
    "cid": {"name": "Client ID", "group": "General"},
    "uid": {"name": "User ID", "group": "General"},
    "ul": {"name": "User language", "group": "General"},
    "sr": {"name": "Screen resolution", "group": "General"},
    "_s": {"name": "Hit counter", "group": "General"},
    "en": {"name": "Event name", "group": "Event"},
    "_et": {"name": "Engagement time (ms)", "group": "Event"},
    "_ee": {"name": "Enhanced measurement", "group": "Event"},
    "dl": {"name": "Page location", "group": "Page"},
    "dr": {"name": "Page referrer", "group": "Page"},
    "dt": {"name": "Page title", "group": "Page"},
    "sid": {"name": "Session ID", "group": "Session"},
    "sct": {"name": "Session count", "group": "Session"},
    "seg": {"name": "Session engaged", "group": "Session"},
    "_fv": {"name": "First visit", "group": "Session"},
    "_ss": {"name": "Session start", "group": "Session"},
    "_nsi": {"name": "New session ID", "group": "Session"},
    "gcs": {"name": "Consent state", "group": "Consent"},
    "gcd": {"name": "Consent default", "group": "Consent"},
    "dma": {"name": "DMA compliance", "group": "Consent"},
    "npa": {"name": "Non-personalized ads", "group": "Consent"},
    "cu": {"name": "Currency", "group": "Ecommerce"},
}

GTM_PARAMETERS = {
    "id": {"name": "Container ID", "group": "General"},
    "l": {"name": "Data layer name", "group": "General"},
    "gtm_auth": {"name": "Environment auth", "group": "Environment"},
    "gtm_preview": {"name": "Environment preview", "group": "Environment"},
    "gtm_cookies_win": {"name": "Environment cookies", "group": "Environment"},
}

# Parameter name prefixes and the group their fields belong to
GA4_PREFIX_GROUPS = (
    ("ep.", "Event Parameters"),
    ("epn.", "Event Parameters (numeric)"),
    ("up.", "User Properties"),
    ("upn.", "User Properties"),
)

ITEM_PATTERN = re.compile(r"pr(\d+)")


class GA4Provider(BaseProvider):
    """Decoder for Google Analytics 4 web collect requests."""

    def __init__(self):
        super().__init__(
            "GA4",
            "Google Analytics 4",
            ProviderType.ANALYTICS,
            re.compile(
                r"https?://(?:www\.|region\d+\.)?"
                r"(?:google-analytics\.com|analytics\.google\.com)/g/collect",
                re.IGNORECASE
            ),
            GA4_PARAMETERS
        )

    def decode_param(self, name: str, value: str) -> Optional[DecodedField]:
        """Decode prefixed event parameters, user properties and items."""
        for prefix, group in GA4_PREFIX_GROUPS:
            if name.startswith(prefix) and len(name) > len(prefix):
                return DecodedField(
                    key=name,
                    field=name[len(prefix):],
                    value=value,
                    group=group
                )

        match = ITEM_PATTERN.fullmatch(name)
        if match:
            return DecodedField(
                key=name,
                field=f"Item {match.group(1)}",
                value=value,
                group="Items"
            )

        return lookup_param(self.parameter_table, name, value)


class GTMProvider(BaseProvider):
    """Decoder for Google Tag Manager container loads."""

    def __init__(self):
        super().__init__(
            "GOOGLETAGMANAGER",
            "Google Tag Manager",
            ProviderType.TAG_MANAGER,
            re.compile(r"googletagmanager\.com/gtm\.js", re.IGNORECASE),
            GTM_PARAMETERS
        )
