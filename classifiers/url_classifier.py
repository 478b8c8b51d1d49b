"""
URL classifier shared by every site adapter.

A classifier turns an arbitrary user-supplied URL into a canonical
storage path plus a display label, or tells why it can't. The same
algorithm serves every site; only the SiteConfig differs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union
from urllib.parse import urlsplit

import pages_config
from site_loader import SiteConfig
from classifiers.routes import RoutePattern, RouteRejected, parse_query, split_path

ALLOWED_SCHEMES = ('http', 'https')


@dataclass(frozen=True)
class Valid:
    path: str
    label: str


@dataclass(frozen=True)
class InvalidDomain:
    pass


@dataclass(frozen=True)
class InvalidPath:
    pass


ClassificationResult = Union[Valid, InvalidDomain, InvalidPath]

INVALID_DOMAIN = InvalidDomain()
INVALID_PATH = InvalidPath()


class UrlClassifier:
    """
    Site-configured URL classifier.

    classify() is pure and total: any input, including garbage, yields a
    ClassificationResult and never raises.
    """

    def __init__(self, site: SiteConfig, max_url_length: int = pages_config.MAX_URL_LENGTH):
        self.site = site
        self.domain = site.domain.lower()
        self.max_url_length = max_url_length
        self.routes = [RoutePattern(route, site.trailing_slash) for route in site.routes]

    def accepts_host(self, host: str) -> bool:
        """Exact domain or "www." + domain, case-insensitive."""
        host = host.lower()
        return host == self.domain or host == 'www.' + self.domain

    def classify(self, url: str) -> ClassificationResult:
        """
        Classify a raw URL.

        Args:
            url: URL as typed or pasted by the user

        Returns:
            Valid(path, label), INVALID_DOMAIN or INVALID_PATH
        """
        if not isinstance(url, str):
            return INVALID_PATH

        url = url.strip()
        if not url or len(url) > self.max_url_length:
            return INVALID_PATH

        try:
            parts = urlsplit(url)
            host = parts.hostname
        except ValueError:
            return INVALID_PATH

        if parts.scheme not in ALLOWED_SCHEMES or not host:
            return INVALID_PATH

        # Domain check always comes before path matching
        if not self.accepts_host(host):
            return INVALID_DOMAIN

        try:
            segments = split_path(parts.path)
            query = parse_query(parts.query)
            for route in self.routes:
                values = route.match(segments, query)
                if values is not None:
                    return Valid(route.canonical_path(values), route.label(values))
        except RouteRejected:
            return INVALID_PATH

        return INVALID_PATH

    validate = classify

    def __call__(self, url: str) -> ClassificationResult:
        return self.classify(url)

    def __repr__(self):
        return f"UrlClassifier(site={self.site.name!r}, domain={self.domain!r}, routes={len(self.routes)})"
