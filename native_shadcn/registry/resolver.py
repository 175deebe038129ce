"""Dependency resolver — transitive closure over registry dependencies."""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Mapping, Protocol

from native_shadcn.registry.models import RegistryItem, ResolvedSet

logger = logging.getLogger(__name__)


class ItemLookup(Protocol):
    def get(self, name: str) -> RegistryItem | None: ...


def resolve(
    start_names: Iterable[str],
    store: ItemLookup | Mapping[str, RegistryItem],
) -> ResolvedSet:
    """Resolve ``start_names`` and everything they require, breadth first.

    A name is processed at most once, so self-references and cycles
    terminate. Names missing from ``store`` are dropped and recorded in
    ``ResolvedSet.skipped``; they never raise.
    """
    result = ResolvedSet()
    visited: set[str] = set()
    queue = deque(start_names)

    while queue:
        name = queue.popleft()
        if name in visited:
            continue
        visited.add(name)

        item = store.get(name)
        if item is None:
            logger.debug("Skipping '%s': not found in registry", name)
            result.skipped.append(name)
            continue

        result.items[name] = item
        queue.extend(item.registry_dependencies)

    return result
