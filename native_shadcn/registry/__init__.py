"""Registry — the resolution and fetch core of native-shadcn.

The registry layer provides:
- Models: validated, immutable registry items parsed from the JSON wire format
- Store: a read-only name -> item mapping loaded from index.json
- Resolution: transitive closure over registry dependencies
- Ordering: dependencies-first install order
- Aggregation: the union of package dependencies for one install step
- Fetching: template content with bounded retries and exponential backoff
"""

from native_shadcn.registry.dependencies import (
    PackageDependencies,
    collect_dependencies,
    filter_installed,
)
from native_shadcn.registry.fetcher import AsyncTemplateFetcher, TemplateFetcher
from native_shadcn.registry.models import (
    RegistryItem,
    RegistryItemFile,
    RegistryItemType,
    ResolvedSet,
    parse_registry_item,
)
from native_shadcn.registry.ordering import sort_by_dependency_order
from native_shadcn.registry.resolver import resolve
from native_shadcn.registry.store import RegistryStore

__all__ = [
    "AsyncTemplateFetcher",
    "PackageDependencies",
    "RegistryItem",
    "RegistryItemFile",
    "RegistryItemType",
    "RegistryStore",
    "ResolvedSet",
    "TemplateFetcher",
    "collect_dependencies",
    "filter_installed",
    "parse_registry_item",
    "resolve",
    "sort_by_dependency_order",
]
