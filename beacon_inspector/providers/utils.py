"""Utilities for beacon decoding including URL parsing and pattern handling."""

import logging
import re
from functools import lru_cache
from typing import Iterable, Iterator, List, Optional, Pattern, Tuple, Union
from urllib.parse import SplitResult, parse_qsl, urlsplit

from ..errors import UrlParseError


logger = logging.getLogger(__name__)

ParamPair = Tuple[str, str]

# Matches nothing; used when a combined pattern has no alternatives
NEVER_MATCH: Pattern[str] = re.compile(r"(?!)")


@lru_cache(maxsize=128)
def compile_pattern(pattern: Union[str, Pattern[str]], flags: int = 0) -> Optional[Pattern[str]]:
    """Compile and cache a regex pattern.

    Args:
        pattern: Regex pattern string, or an already compiled pattern
        flags: Regex compilation flags (ignored for compiled patterns)

    Returns:
        Compiled pattern or None if invalid
    """
    if isinstance(pattern, re.Pattern):
        return pattern

    try:
        return re.compile(pattern, flags)
    except re.error as e:
        logger.warning("Invalid regex pattern %r: %s", pattern, e)
        return None


def pattern_source(pattern: Pattern[str]) -> str:
    """Return the source of a pattern as a self-contained alternative.

    Case-insensitive patterns are wrapped in a scoped ``(?i:...)`` group so
    the flag survives being joined with other patterns.
    """
    if pattern.flags & re.IGNORECASE:
        return f"(?i:{pattern.pattern})"
    return f"(?:{pattern.pattern})"


def combine_patterns(patterns: Iterable[Pattern[str]]) -> Pattern[str]:
    """Combine patterns into a single alternation.

    Args:
        patterns: Compiled patterns, in precedence order

    Returns:
        Pattern matching wherever any input pattern matches; a pattern that
        never matches when no patterns are given
    """
    sources = [pattern_source(pattern) for pattern in patterns]
    if not sources:
        return NEVER_MATCH
    return re.compile("|".join(sources))


def parse_beacon_url(url: str) -> SplitResult:
    """Split an absolute beacon URL into its components.

    Args:
        url: Raw request URL

    Returns:
        The split URL (scheme, netloc, path, query, fragment)

    Raises:
        UrlParseError: If the URL is malformed or not absolute
    """
    if not isinstance(url, str):
        raise UrlParseError(repr(url), "expected a string")

    try:
        parts = urlsplit(url)
        # Accessing the port validates it
        parts.port
    except ValueError as e:
        raise UrlParseError(url, str(e)) from e

    if not parts.scheme or not parts.netloc:
        raise UrlParseError(url, "URL must be absolute")

    return parts


def parse_query_pairs(query: str) -> List[ParamPair]:
    """Parse a query string into ordered (name, value) pairs.

    Duplicate names are kept as separate pairs and names without a value
    map to an empty string. Percent escapes and ``+`` are decoded.
    """
    if not query:
        return []

    if query.startswith('?'):
        query = query[1:]

    return parse_qsl(query, keep_blank_values=True)


def split_post_data(post_data: Optional[str]) -> List[ParamPair]:
    """Split a form-encoded POST body into raw (name, value) pairs.

    Each ``&`` separated chunk is split on its first ``=``. A chunk without
    ``=`` becomes a name with an empty value. Pairs are not percent-decoded.

    Args:
        post_data: Request body, or None

    Returns:
        List of pairs, empty when there is no body
    """
    if not isinstance(post_data, str) or post_data == "":
        return []

    pairs = []
    for chunk in post_data.split("&"):
        name, _, value = chunk.partition("=")
        pairs.append((name, value))

    return pairs


def unstack_context_data(pairs: Iterable[ParamPair]) -> Iterator[ParamPair]:
    """Expand flattened context-data scopes into effective parameter names.

    A name ending in ``.`` opens a scope and a name starting with ``.``
    closes the innermost one; neither is yielded. Every other name is
    prefixed with the concatenation of the currently open scopes, so
    ``c.=&a.=&b=1&.a=&.c=`` yields ``("c.a.b", "1")``.

    Closing with no open scope is ignored.

    Args:
        pairs: Raw (name, value) pairs in request order

    Yields:
        (effective name, value) pairs
    """
    stack: List[str] = []

    for name, value in pairs:
        if name.endswith("."):
            stack.append(name)
            continue

        if name.startswith("."):
            if stack:
                stack.pop()
            else:
                logger.debug("Ignoring context data close %r with no open scope", name)
            continue

        yield "".join(stack) + name, value


def last_segment(name: str, separator: str = ".") -> str:
    """Return the text after the last separator in a dotted name."""
    return name.rsplit(separator, 1)[-1]
