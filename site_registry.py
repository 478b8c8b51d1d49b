"""
Site registry - wires each site definition to its classifier, storage
and use cases.

Instances are built explicitly at startup and passed to the HTTP service
and the command line; there is no process-wide state.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
from urllib.parse import urlsplit

from classifiers import UrlClassifier
from custom_pages_usecases import CustomPagesCrudUseCases, CustomPagesOrderUseCases
from persistence import JSONCustomPagesRepository
from site_loader import SiteConfig, load_sites

logger = logging.getLogger(__name__)


@dataclass
class SiteAdapter:
    """Everything needed to manage one site's custom pages."""
    site: SiteConfig
    classifier: UrlClassifier
    repository: object
    crud: CustomPagesCrudUseCases
    order: CustomPagesOrderUseCases
    # Held around read-modify-write sequences: one writer per repository
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def name(self) -> str:
        return self.site.name

    @classmethod
    def create(cls, site: SiteConfig, repository) -> 'SiteAdapter':
        """
        Build an adapter for a site around a sync or async repository.
        """
        classifier = UrlClassifier(site)
        log_name = f"custom_pages.{site.name}"
        crud = CustomPagesCrudUseCases(
            repository,
            classifier,
            invalid_domain_message=site.messages.invalid_domain,
            invalid_path_message=site.messages.invalid_path,
            log_name=log_name
        )
        order = CustomPagesOrderUseCases(repository, log_name=log_name)
        return cls(site=site, classifier=classifier, repository=repository, crud=crud, order=order)


class SiteRegistry:
    """Lookup of site adapters by name or by URL host."""

    def __init__(self, adapters: List[SiteAdapter]):
        self._adapters: Dict[str, SiteAdapter] = {}
        for adapter in adapters:
            if adapter.name in self._adapters:
                raise ValueError(f"Duplicate site name: {adapter.name}")
            self._adapters[adapter.name] = adapter

    @classmethod
    def from_directory(cls, sites_dir: Union[str, Path],
                       storage_dir: Union[str, Path]) -> 'SiteRegistry':
        """
        Load every site file and give each site a JSON repository.

        Raises:
            FileNotFoundError: If sites_dir doesn't exist
            ValueError: If a site file is invalid
        """
        sites = load_sites(str(sites_dir))
        adapters = [
            SiteAdapter.create(site, JSONCustomPagesRepository(storage_dir, site.storage_key))
            for site in sites
        ]
        logger.info(f"Loaded {len(adapters)} site(s) from {sites_dir}")
        return cls(adapters)

    def __iter__(self):
        return iter(self._adapters.values())

    def __len__(self):
        return len(self._adapters)

    def names(self) -> List[str]:
        return list(self._adapters)

    def get(self, name: str) -> SiteAdapter:
        """
        Raises:
            KeyError: If no site has this name
        """
        try:
            return self._adapters[name]
        except KeyError:
            raise KeyError(f"Unknown site: {name}") from None

    def find_for_url(self, url: str) -> Optional[SiteAdapter]:
        """Return the adapter whose domain accepts the URL's host, if any."""
        try:
            host = urlsplit(url.strip()).hostname
        except (ValueError, AttributeError):
            return None
        if not host:
            return None
        for adapter in self._adapters.values():
            if adapter.classifier.accepts_host(host):
                return adapter
        return None
