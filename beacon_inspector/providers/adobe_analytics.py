"""Adobe Analytics decoder with props, eVars and stacked context data."""

import re
from typing import Iterable, Iterator, List, Optional
from urllib.parse import SplitResult

from .base import BaseProvider, DecodedField, ProviderType, lookup_param
from .utils import ParamPair, last_segment, unstack_context_data


ADOBE_ANALYTICS_PARAMETERS = {
    "ns": {"name": "Visitor namespace", "group": "General"},
    "ndh": {"name": "Image sent from JS?", "group": "General"},
    "ch": {"name": "Channel", "group": "General"},
    "v0": {"name": "Campaign", "group": "General"},
    "r": {"name": "Referrer URL", "group": "General"},
    "ce": {"name": "Character set", "group": "General"},
    "cl": {"name": "Cookie lifetime", "group": "General"},
    "g": {"name": "Current URL", "group": "General"},
    "j": {"name": "JavaScript version", "group": "General"},
    "bw": {"name": "Browser width", "group": "General"},
    "bh": {"name": "Browser height", "group": "General"},
    "s": {"name": "Screen resolution", "group": "General"},
    "c": {"name": "Screen color depth", "group": "General"},
    "ct": {"name": "Connection type", "group": "General"},
    "p": {"name": "Netscape plugins", "group": "General"},
    "k": {"name": "Cookies enabled?", "group": "General"},
    "hp": {"name": "Home page?", "group": "General"},
    "pid": {"name": "Page ID", "group": "General"},
    "pidt": {"name": "Page ID type", "group": "General"},
    "oid": {"name": "Object ID", "group": "General"},
    "oidt": {"name": "Object ID type", "group": "General"},
    "ot": {"name": "Object tag name", "group": "General"},
    "pe": {"name": "Link type", "group": "General"},
    "pev1": {"name": "Link URL", "group": "General"},
    "pev2": {"name": "Link name", "group": "General"},
    "pev3": {"name": "Video milestone", "group": "General"},
    "cc": {"name": "Currency code", "group": "General"},
    "t": {"name": "Browser time", "group": "General"},
    "v": {"name": "Javascript-enabled browser?", "group": "General"},
    "pccr": {"name": "Prevent infinite redirects", "group": "General"},
    "vid": {"name": "Visitor ID", "group": "General"},
    "vidn": {"name": "New visitor ID", "group": "General"},
    "fid": {"name": "Fallback Visitor ID", "group": "General"},
    "mid": {"name": "Marketing Cloud Visitor ID", "group": "General"},
    "aid": {"name": "Legacy Visitor ID", "group": "General"},
    "cdp": {"name": "Cookie domain periods", "group": "General"},
    "pageName": {"name": "Page name", "group": "General"},
    "pageType": {"name": "Page type", "group": "General"},
    "server": {"name": "Server", "group": "General"},
    "events": {"name": "Events", "group": "General"},
    "products": {"name": "Products", "group": "General"},
    "purchaseID": {"name": "Purchase ID", "group": "General"},
    "state": {"name": "Visitor state", "group": "General"},
    "vmk": {"name": "Visitor migration key", "group": "General"},
    "vvp": {"name": "Variable provider", "group": "General"},
    "xact": {"name": "Transaction ID", "group": "General"},
    "zip": {"name": "ZIP/Postal code", "group": "General"},
    "rsid": {"name": "Report Suites", "group": "General"},
}

PROP_PATTERN = re.compile(r"^(?:c|prop)(\d+)$", re.IGNORECASE)
EVAR_PATTERN = re.compile(r"^(?:v|eVar)(\d+)$", re.IGNORECASE)
HIERARCHY_PATTERN = re.compile(r"^(?:h|hier)(\d+)$", re.IGNORECASE)
CONTROL_PATTERN = re.compile(r"^(?:AQB|AQE)$", re.IGNORECASE)
RSID_PATH_PATTERN = re.compile(r"/b/ss/([^/]+)/")

# Dotted prefixes (checked in order) and the group their fields belong to
CONTEXT_DATA_GROUPS = (
    (".a.media.", "Media Module"),
    (".a.activitymap.", "Activity Map"),
    (".", "Context Data"),
)


class AdobeAnalyticsProvider(BaseProvider):
    """Decoder for Adobe Analytics (AppMeasurement) image requests."""

    def __init__(self):
        super().__init__(
            "ADOBEANALYTICS",
            "Adobe Analytics",
            ProviderType.ANALYTICS,
            r"/b/ss/|\.2o7\.net/|\.sc\d?\.omtrdc\.net/",
            ADOBE_ANALYTICS_PARAMETERS
        )

    def resolve_params(self, pairs: Iterable[ParamPair]) -> Iterator[ParamPair]:
        """Expand stacked context data (``a.``/``.a``) into dotted names."""
        return unstack_context_data(pairs)

    def decode_param(self, name: str, value: str) -> Optional[DecodedField]:
        """Classify a parameter as prop, eVar, hierarchy or context data.

        Args:
            name: Effective parameter name (context-data scopes applied)
            value: Raw parameter value

        Returns:
            Decoded field, or None for the AQB/AQE control markers
        """
        match = PROP_PATTERN.fullmatch(name)
        if match:
            return DecodedField(
                key=name,
                field=f"prop{match.group(1)}",
                value=value,
                group="Custom Traffic Variables (props)"
            )

        match = EVAR_PATTERN.fullmatch(name)
        if match and name != "v0":
            return DecodedField(
                key=name,
                field=f"eVar{match.group(1)}",
                value=value,
                group="Custom Conversion Variables (eVars)"
            )

        match = HIERARCHY_PATTERN.fullmatch(name)
        if match:
            return DecodedField(
                key=name,
                field=f"Hierarchy {match.group(1)}",
                value=value,
                group="Hierarchy Variables"
            )

        # A marker at position 0 does not count
        for marker, group in CONTEXT_DATA_GROUPS:
            if name.find(marker) > 0:
                return DecodedField(
                    key=name,
                    field=last_segment(name),
                    value=value,
                    group=group
                )

        if CONTROL_PATTERN.fullmatch(name):
            return None

        return lookup_param(self.parameter_table, name, value)

    def decode_custom(self, url_parts: SplitResult) -> List[DecodedField]:
        """Extract the report suite ID from the request path."""
        match = RSID_PATH_PATTERN.search(url_parts.path)
        if not match:
            return []

        return [self.table_field("rsid", match.group(1), "Report Suites", "General")]
