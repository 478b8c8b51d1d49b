"""
Route patterns for URL classification.

A RoutePattern is compiled from one RouteConfig and knows how to match
raw path segments and query parameters, build the canonical storage
path and derive the display label. These functions do no I/O.
"""

import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote, quote_plus, unquote

from site_loader import PLACEHOLDER_RE, RouteConfig
from classifiers.labels import render_label, slug_to_label

# A '%' not followed by two hex digits
MALFORMED_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
PAGE_NUMBER_RE = re.compile(r"^\d+$")

# Sub-delimiters kept literal in path segments (RFC 3986 pchar)
PATH_SAFE = "!$&'()*+,;=:@"


class RouteRejected(Exception):
    """A route matched the URL shape but the URL content is unusable."""


def decode_component(raw: str, plus_as_space: bool = False) -> str:
    """
    Strictly percent-decode a URL component.

    Raises:
        RouteRejected: On malformed escapes or escapes that are not UTF-8
    """
    if MALFORMED_ESCAPE_RE.search(raw):
        raise RouteRejected(f"Malformed percent-encoding: {raw}")
    if plus_as_space:
        raw = raw.replace('+', ' ')
    try:
        return unquote(raw, errors='strict')
    except UnicodeDecodeError as e:
        raise RouteRejected(f"Invalid UTF-8 in: {raw}") from e


def split_path(raw_path: str) -> List[str]:
    """
    Split a raw URL path into segments, ignoring leading/trailing slashes.

    "/categories/amateur/" -> ["categories", "amateur"], "/" -> []
    """
    if MALFORMED_ESCAPE_RE.search(raw_path):
        raise RouteRejected(f"Malformed percent-encoding: {raw_path}")
    stripped = raw_path.strip('/')
    if not stripped:
        return []
    return stripped.split('/')


def parse_query(raw_query: str) -> List[Tuple[str, str]]:
    """
    Split a raw query string into (key, raw value) pairs.

    Keys are decoded, values are left encoded so that only the values a
    route actually uses are validated.
    """
    pairs = []
    if not raw_query:
        return pairs
    for part in raw_query.split('&'):
        if not part:
            continue
        key, _, value = part.partition('=')
        pairs.append((unquote(key.replace('+', ' ')), value))
    return pairs


def strip_pagination(segments: List[str]) -> Optional[List[str]]:
    """
    Remove a trailing "/<n>" or "/page/<n>" suffix.

    Returns:
        The shortened segment list, or None if there is no suffix
    """
    if not segments or not PAGE_NUMBER_RE.match(segments[-1]):
        return None
    stripped = segments[:-1]
    if stripped and stripped[-1] == 'page':
        stripped = stripped[:-1]
    return stripped


def encode_path_value(value: str) -> str:
    return quote(value, safe=PATH_SAFE)


def encode_query_value(value: str) -> str:
    return quote_plus(value, safe='')


class RoutePattern:
    """One compiled entry of a classifier's ordered route table."""

    def __init__(self, config: RouteConfig, trailing_slash: bool = True):
        self.config = config
        self.trailing_slash = trailing_slash
        self._segments = [s for s in config.path.strip('/').split('/') if s]
        self._regexes = [self._compile_segment(s) for s in self._segments]

    @property
    def name(self) -> str:
        return self.config.name

    @staticmethod
    def _compile_segment(segment: str) -> re.Pattern:
        parts = []
        pos = 0
        for m in PLACEHOLDER_RE.finditer(segment):
            parts.append(re.escape(segment[pos:m.start()]))
            parts.append(f"(?P<{m.group(1)}>[^/]+)")
            pos = m.end()
        parts.append(re.escape(segment[pos:]))
        return re.compile(''.join(parts))

    def _match_segments(self, segments: List[str]) -> Optional[Dict[str, str]]:
        if len(segments) != len(self._regexes):
            return None
        values = {}
        for regex, segment in zip(self._regexes, segments):
            m = regex.fullmatch(segment)
            if m is None:
                return None
            values.update(m.groupdict())
        return values

    def match(self, segments: List[str],
              query: List[Tuple[str, str]]) -> Optional[Dict[str, str]]:
        """
        Match raw path segments and query pairs against this route.

        Args:
            segments: Raw path segments from split_path()
            query: Raw query pairs from parse_query()

        Returns:
            Decoded placeholder values, or None if the route doesn't match

        Raises:
            RouteRejected: If the URL has this route's shape but a captured
                value is malformed, or a search value is blank
        """
        raw_values = self._match_segments(segments)
        if raw_values is None and self.config.paginated:
            stripped = strip_pagination(segments)
            if stripped is not None:
                raw_values = self._match_segments(stripped)
        if raw_values is None:
            return None

        values = {name: decode_component(raw) for name, raw in raw_values.items()}

        query_key = self.config.query_key
        if query_key:
            raw_value = next((v for k, v in query if k == query_key), None)
            if raw_value is None:
                return None
            values[query_key] = decode_component(raw_value, plus_as_space=True)

        if self.config.search:
            term = values[self.config.placeholders[-1]]
            if not term.strip():
                raise RouteRejected(f"Blank search term for route '{self.name}'")

        return values

    def canonical_path(self, values: Dict[str, str]) -> str:
        """
        Build the canonical storage path from decoded values.

        Pagination is never part of the result and only the route's own
        query parameters are kept.
        """
        segments = [
            PLACEHOLDER_RE.sub(lambda m: encode_path_value(values[m.group(1)]), segment)
            for segment in self._segments
        ]
        path = '/' + '/'.join(segments)
        if segments and self.trailing_slash:
            path += '/'

        query_pairs = list(self.config.fixed_query.items())
        if self.config.query_key:
            query_pairs.append((self.config.query_key, values[self.config.query_key]))
        if query_pairs:
            path += '?' + '&'.join(
                f"{encode_query_value(key)}={encode_query_value(value)}"
                for key, value in query_pairs
            )
        return path

    def label(self, values: Dict[str, str]) -> str:
        """Derive the display label for decoded values."""
        if self.config.label is not None:
            return render_label(self.config.label, values)
        placeholders = self.config.placeholders
        if placeholders:
            return slug_to_label(values[placeholders[-1]])
        if self._segments:
            return slug_to_label(unquote(self._segments[-1]))
        return "Home"
