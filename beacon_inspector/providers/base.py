"""Base provider protocol and data models for beacon decoding.

This module defines the interface every vendor decoder satisfies, the data
structures a decode produces, and the shared decode algorithm. Vendor
decoders customise behaviour through three hooks (``resolve_params``,
``decode_param`` and ``decode_custom``) while ``decode_beacon`` drives the
overall flow.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Pattern, Protocol, Union
from urllib.parse import SplitResult

from pydantic import BaseModel, Field

from .utils import (
    NEVER_MATCH,
    ParamPair,
    compile_pattern,
    parse_beacon_url,
    parse_query_pairs,
    split_post_data
)

DEFAULT_GROUP = "Other"


class ProviderType(str, Enum):
    """Kinds of vendor that emit beacons."""
    ANALYTICS = "analytics"
    TESTING = "testing"
    TAG_MANAGER = "tag-manager"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: Union["ProviderType", str, None]) -> "ProviderType":
        """Map a raw type value to a ProviderType, defaulting to UNKNOWN."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN

        normalized = value.strip().lower()
        if normalized == "tagmanager":
            return cls.TAG_MANAGER

        for member in cls:
            if member.value == normalized:
                return member
        return cls.UNKNOWN

    @property
    def label(self) -> str:
        """Human-readable type name."""
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    ProviderType.ANALYTICS: "Analytics",
    ProviderType.TESTING: "UX Testing",
    ProviderType.TAG_MANAGER: "Tag Manager",
    ProviderType.UNKNOWN: "Unknown",
}


@dataclass(frozen=True)
class ProviderDescriptor:
    """Immutable identity of a vendor decoder."""

    key: str
    name: str
    type: ProviderType
    pattern: Pattern[str]


@dataclass(frozen=True)
class ParamDefinition:
    """Static metadata for one recognised parameter."""

    name: Optional[str] = None
    group: Optional[str] = None


ParameterTable = Mapping[str, ParamDefinition]


def build_parameter_table(raw: Mapping[str, Mapping[str, str]]) -> ParameterTable:
    """Build a read-only parameter table from plain dictionary data.

    Args:
        raw: Mapping of parameter name to a dict with optional ``name`` and
            ``group`` entries

    Returns:
        Read-only mapping of parameter name to ParamDefinition
    """
    table = {
        param: ParamDefinition(name=info.get("name"), group=info.get("group"))
        for param, info in raw.items()
    }
    return MappingProxyType(table)


EMPTY_TABLE: ParameterTable = MappingProxyType({})


class DecodedField(BaseModel):
    """One decoded beacon parameter."""

    key: str = Field(description="Raw (or synthesised) parameter name")
    field: str = Field(description="Human-readable label")
    value: str = Field(description="Raw parameter value, unmodified")
    group: str = Field(default=DEFAULT_GROUP, description="Display category")


class ProviderInfo(BaseModel):
    """Provider identity as reported in a decoded beacon."""

    name: str = Field(description="Provider display name")
    key: str = Field(description="Stable provider identifier")
    type: str = Field(description="Provider type value")


class ParsedBeacon(BaseModel):
    """Structured result of decoding a single beacon."""

    provider: ProviderInfo = Field(description="Provider that decoded the beacon")
    data: List[DecodedField] = Field(
        default_factory=list,
        description="Decoded fields in request order, custom fields last"
    )

    def get(self, key: str) -> Optional[DecodedField]:
        """Return the first decoded field with the given key."""
        for item in self.data:
            if item.key == key:
                return item
        return None

    def groups(self) -> Dict[str, List[DecodedField]]:
        """Group decoded fields by category, in order of first appearance."""
        grouped: Dict[str, List[DecodedField]] = {}
        for item in self.data:
            grouped.setdefault(item.group, []).append(item)
        return grouped

    @property
    def is_unknown(self) -> bool:
        """Check if no registered provider recognised the beacon."""
        return self.provider.type == ProviderType.UNKNOWN.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for serialization."""
        return self.model_dump()


class ParamDecoder(Protocol):
    """Protocol that all beacon decoders must implement."""

    @property
    def descriptor(self) -> ProviderDescriptor:
        """Immutable identity of this decoder."""
        ...

    @property
    def key(self) -> str:
        """Unique key for this decoder."""
        ...

    @property
    def parameter_table(self) -> ParameterTable:
        """Known parameters for this vendor."""
        ...

    def matches(self, url: str) -> bool:
        """Check if this decoder handles the given URL."""
        ...

    def resolve_params(self, pairs: Iterable[ParamPair]) -> Iterator[ParamPair]:
        """Map raw request pairs to the effective pairs to decode."""
        ...

    def decode_param(self, name: str, value: str) -> Optional[DecodedField]:
        """Decode one parameter, or return None to omit it."""
        ...

    def decode_custom(self, url_parts: SplitResult) -> List[DecodedField]:
        """Derive extra fields from URL parts outside the query string."""
        ...

    def decode(self, url: str, post_data: Optional[str] = "") -> ParsedBeacon:
        """Decode a beacon into a ParsedBeacon."""
        ...


def lookup_param(table: ParameterTable, name: str, value: str) -> DecodedField:
    """Decode a parameter by looking it up in a vendor table.

    Unknown names are labelled with the raw name and the default group.

    Args:
        table: Vendor parameter table
        name: Parameter name
        value: Parameter value

    Returns:
        Decoded field; never omits
    """
    definition = table.get(name)
    if definition is None:
        return DecodedField(key=name, field=name, value=value, group=DEFAULT_GROUP)

    return DecodedField(
        key=name,
        field=definition.name or name,
        value=value,
        group=definition.group or DEFAULT_GROUP
    )


def decode_beacon(decoder: ParamDecoder, url: str, post_data: Optional[str] = "") -> ParsedBeacon:
    """Decode a beacon URL and optional POST body with the given decoder.

    Query pairs are decoded first, POST pairs after them, and fields derived
    from the rest of the URL are appended last.

    Args:
        decoder: Decoder to apply
        url: Absolute beacon URL
        post_data: Form-encoded request body, if any

    Returns:
        Decoded beacon

    Raises:
        UrlParseError: If the URL cannot be parsed
    """
    url_parts = parse_beacon_url(url)

    pairs = parse_query_pairs(url_parts.query)
    pairs.extend(split_post_data(post_data))

    data: List[DecodedField] = []
    for name, value in decoder.resolve_params(pairs):
        decoded = decoder.decode_param(name, value)
        if decoded is not None:
            data.append(decoded)

    data.extend(decoder.decode_custom(url_parts))

    descriptor = decoder.descriptor
    return ParsedBeacon(
        provider=ProviderInfo(
            name=descriptor.name,
            key=descriptor.key,
            type=descriptor.type.value
        ),
        data=data
    )


class BaseProvider:
    """Generic decoder providing table lookup for every parameter.

    Vendor decoders subclass this and override the hooks they need; the
    decode flow itself lives in ``decode_beacon``.
    """

    def __init__(self, key: str, name: str,
                 provider_type: Union[ProviderType, str],
                 pattern: Union[str, Pattern[str]],
                 parameters: Optional[Mapping[str, Mapping[str, str]]] = None):
        compiled = compile_pattern(pattern)
        if compiled is None:
            raise ValueError(f"Invalid match pattern for provider {key!r}: {pattern!r}")

        self._descriptor = ProviderDescriptor(
            key=key,
            name=name,
            type=ProviderType.coerce(provider_type),
            pattern=compiled
        )
        self._parameters = build_parameter_table(parameters) if parameters else EMPTY_TABLE

    @property
    def descriptor(self) -> ProviderDescriptor:
        """Immutable identity of this decoder."""
        return self._descriptor

    @property
    def key(self) -> str:
        return self._descriptor.key

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def type(self) -> ProviderType:
        return self._descriptor.type

    @property
    def pattern(self) -> Pattern[str]:
        return self._descriptor.pattern

    @property
    def parameter_table(self) -> ParameterTable:
        """Known parameters for this vendor."""
        return self._parameters

    def matches(self, url: str) -> bool:
        """Check if this provider should decode the given URL."""
        return self.pattern.search(url) is not None

    def resolve_params(self, pairs: Iterable[ParamPair]) -> Iterator[ParamPair]:
        """Return the request pairs unchanged."""
        return iter(pairs)

    def decode_param(self, name: str, value: str) -> Optional[DecodedField]:
        """Decode a parameter via the vendor's parameter table."""
        return lookup_param(self.parameter_table, name, value)

    def decode_custom(self, url_parts: SplitResult) -> List[DecodedField]:
        """No custom fields by default."""
        return []

    def decode(self, url: str, post_data: Optional[str] = "") -> ParsedBeacon:
        """Decode a beacon URL and optional POST body."""
        return decode_beacon(self, url, post_data)

    def table_field(self, key: str, value: str, default_name: str,
                    default_group: str) -> DecodedField:
        """Build a custom field labelled from the table, with fallbacks."""
        definition = self.parameter_table.get(key)
        return DecodedField(
            key=key,
            field=(definition.name if definition else None) or default_name,
            value=value,
            group=(definition.group if definition else None) or default_group
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"


class UnknownProvider(BaseProvider):
    """Neutral decoder used when no registered provider matches a URL.

    It never matches anything and produces no fields, but still rejects
    unparseable URLs.
    """

    def __init__(self):
        super().__init__("UNKNOWN", "Unknown", ProviderType.UNKNOWN, NEVER_MATCH)

    def decode_param(self, name: str, value: str) -> Optional[DecodedField]:
        return None
