"""
Site definition loader.

Loads and validates YAML site files. Each file configures one adapter:
the domain it accepts and the ordered route table its URL classifier
matches against.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path
import re
import yaml

# {name} placeholders inside a path template segment
PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@dataclass
class RouteConfig:
    """One entry of a site's route table."""
    name: str
    path: str  # e.g. '/categories/{slug}' or '/dm{num}/en/new'
    label: Optional[str] = None  # e.g. 'Category: {slug}'
    paginated: bool = False
    query_key: Optional[str] = None
    search: bool = False
    fixed_query: Dict[str, str] = field(default_factory=dict)

    @property
    def placeholders(self) -> List[str]:
        """Placeholder names in path order, then the query key."""
        names = PLACEHOLDER_RE.findall(self.path)
        if self.query_key:
            names.append(self.query_key)
        return names

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RouteConfig':
        """
        Create a RouteConfig from a dictionary.

        Raises:
            ValueError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Each route must be a dictionary")

        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Route must have a non-empty 'name'")

        path = data.get('path')
        if not isinstance(path, str) or not path.startswith('/'):
            raise ValueError(f"Route '{name}': 'path' must be a string starting with '/'")

        label = data.get('label')
        if label is not None and not isinstance(label, str):
            raise ValueError(f"Route '{name}': 'label' must be a string")

        query_key = data.get('query_key')
        if query_key is not None and (not isinstance(query_key, str) or not query_key):
            raise ValueError(f"Route '{name}': 'query_key' must be a non-empty string")

        fixed_query = data.get('fixed_query') or {}
        if not isinstance(fixed_query, dict):
            raise ValueError(f"Route '{name}': 'fixed_query' must be a dictionary")

        route = cls(
            name=name,
            path=path,
            label=label,
            paginated=bool(data.get('paginated', False)),
            query_key=query_key,
            search=bool(data.get('search', False)),
            fixed_query={str(k): str(v) for k, v in fixed_query.items()}
        )

        for placeholder in PLACEHOLDER_RE.findall(path):
            if not placeholder.isidentifier():
                raise ValueError(f"Route '{name}': invalid placeholder name '{placeholder}'")

        names = route.placeholders
        if len(names) != len(set(names)):
            raise ValueError(f"Route '{name}': placeholder names must be unique")

        if route.search and not names:
            raise ValueError(f"Route '{name}': search routes need a placeholder or 'query_key'")

        if label:
            for used in PLACEHOLDER_RE.findall(label):
                if used not in names:
                    raise ValueError(f"Route '{name}': label uses unknown placeholder '{used}'")

        return route


@dataclass
class SiteMessages:
    """User-facing messages for rejected URLs."""
    invalid_domain: str = "Invalid domain"
    invalid_path: str = "Invalid URL path"


@dataclass
class SiteConfig:
    """
    Complete adapter configuration.

    The route order is significant: the first matching route wins.
    """
    name: str
    domain: str
    routes: List[RouteConfig]
    trailing_slash: bool = True
    storage_key: str = ""
    messages: SiteMessages = field(default_factory=SiteMessages)

    def __post_init__(self):
        if not self.storage_key:
            slug = re.sub(r'\W+', '_', self.name).strip('_').upper()
            self.storage_key = f"{slug}_CUSTOM_PAGES"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SiteConfig':
        """
        Create a SiteConfig from a dictionary (loaded from YAML).

        Args:
            data: Dictionary from YAML file

        Returns:
            SiteConfig instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        if 'name' not in data:
            raise ValueError("Site must have 'name' field")
        if 'domain' not in data:
            raise ValueError("Site must have 'domain' field")

        name = data['name']
        if not isinstance(name, str) or not name.strip():
            raise ValueError("'name' must be a non-empty string")

        domain = data['domain']
        if not isinstance(domain, str) or not domain.strip():
            raise ValueError("'domain' must be a non-empty string")
        domain = domain.strip().lower()
        if domain.startswith('www.'):
            raise ValueError("'domain' must not include the 'www.' prefix")
        if '/' in domain or ':' in domain:
            raise ValueError(f"'domain' must be a bare host name: {domain}")

        routes_data = data.get('routes')
        if not isinstance(routes_data, list) or not routes_data:
            raise ValueError("'routes' must be a non-empty list")

        routes = [RouteConfig.from_dict(route) for route in routes_data]

        route_names = [route.name for route in routes]
        if len(route_names) != len(set(route_names)):
            raise ValueError("Route names must be unique within a site")

        messages = SiteMessages()
        if 'messages' in data:
            messages_data = data['messages']
            if not isinstance(messages_data, dict):
                raise ValueError("'messages' must be a dictionary")
            messages.invalid_domain = messages_data.get('invalid_domain', messages.invalid_domain)
            messages.invalid_path = messages_data.get('invalid_path', messages.invalid_path)

        return cls(
            name=name,
            domain=domain,
            routes=routes,
            trailing_slash=bool(data.get('trailing_slash', True)),
            storage_key=data.get('storage_key', ''),
            messages=messages
        )


def load_site(file_path: str) -> SiteConfig:
    """
    Load a site definition from a YAML file.

    Args:
        file_path: Path to YAML site file

    Returns:
        SiteConfig instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the site definition is invalid
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Site file not found: {file_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError("Site file must contain a YAML dictionary")

    return SiteConfig.from_dict(data)


def load_sites(directory: str) -> List[SiteConfig]:
    """
    Load every *.yaml / *.yml site file in a directory, sorted by file name.

    Raises:
        FileNotFoundError: If the directory doesn't exist
        ValueError: If a file is invalid or two sites share a name or domain
    """
    site_dir = Path(directory)
    if not site_dir.is_dir():
        raise FileNotFoundError(f"Sites directory not found: {directory}")

    files = sorted(list(site_dir.glob('*.yaml')) + list(site_dir.glob('*.yml')))
    sites = []
    seen_names = set()
    seen_domains = set()

    for file in files:
        try:
            site = load_site(str(file))
        except ValueError as e:
            raise ValueError(f"{file.name}: {e}") from e

        if site.name in seen_names:
            raise ValueError(f"{file.name}: duplicate site name '{site.name}'")
        if site.domain in seen_domains:
            raise ValueError(f"{file.name}: duplicate domain '{site.domain}'")

        seen_names.add(site.name)
        seen_domains.add(site.domain)
        sites.append(site)

    return sites


def validate_site(site: SiteConfig) -> List[str]:
    """
    Validate a site and return a list of warnings (not errors).

    Args:
        site: Site to validate

    Returns:
        List of warning messages (empty if no warnings)
    """
    warnings = []

    if '.' not in site.domain:
        warnings.append(f"Domain has no dot, is it complete? {site.domain}")

    seen_shapes = {}
    for route in site.routes:
        if route.label is None and not route.placeholders:
            warnings.append(f"Route '{route.name}' has no label; the last path segment will be used")

        # Same path and query key means the later route can never match
        shape = (PLACEHOLDER_RE.sub('{}', route.path.rstrip('/')), route.query_key)
        if shape in seen_shapes:
            warnings.append(
                f"Route '{route.name}' is shadowed by earlier route '{seen_shapes[shape]}'"
            )
        else:
            seen_shapes[shape] = route.name

        if route.search and route.query_key is None and route.paginated:
            warnings.append(
                f"Route '{route.name}' is a paginated path search; numeric terms will look like page numbers"
            )

    return warnings
