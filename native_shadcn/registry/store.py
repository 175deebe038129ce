"""Read-only registry store.

Populated once, from an ``index.json`` on disk or fetched from the remote
registry, and treated as immutable for the rest of the invocation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator

from native_shadcn.errors import RegistryItemError, RegistryLoadError
from native_shadcn.registry.models import RegistryItem, parse_registry_item


class RegistryStore:
    """Name -> :class:`RegistryItem` mapping with O(1) lookups."""

    INDEX_FILE = "index.json"

    def __init__(self, items: Iterable[RegistryItem] = ()):
        self._items: dict[str, RegistryItem] = {}
        for item in items:
            if item.name in self._items:
                raise RegistryLoadError(f"Duplicate registry item: {item.name}")
            self._items[item.name] = item

    @classmethod
    def from_index(cls, data: Any) -> RegistryStore:
        """Build a store from a decoded ``index.json`` (a JSON array of items)."""
        if not isinstance(data, list):
            raise RegistryLoadError(
                f"Registry index must be a JSON array, got {type(data).__name__}"
            )
        try:
            return cls(parse_registry_item(entry) for entry in data)
        except RegistryItemError as e:
            raise RegistryLoadError(f"Corrupt registry index: {e}") from e

    @classmethod
    def load(cls, path: str | Path) -> RegistryStore:
        """Load a store from an index file, or from ``index.json`` in a directory."""
        path = Path(path)
        if path.is_dir():
            path = path / cls.INDEX_FILE
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise RegistryLoadError(f"Could not read registry index {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise RegistryLoadError(f"Invalid JSON in registry index {path}: {e}") from e
        return cls.from_index(data)

    def get(self, name: str) -> RegistryItem | None:
        """Return the item called ``name``, or None if the store lacks it."""
        return self._items.get(name)

    def names(self) -> list[str]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[RegistryItem]:
        return iter(self._items.values())
