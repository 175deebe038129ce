"""Package dependency aggregation across resolved registry items.

Registry dependencies name other registry items and are handled by the
resolver; only ``dependencies`` and ``devDependencies`` end up here.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from native_shadcn.errors import ProjectError
from native_shadcn.registry.models import RegistryItem


@dataclass
class PackageDependencies:
    """Deduplicated package names for a single install step."""

    dependencies: set[str] = field(default_factory=set)
    dev_dependencies: set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not self.dependencies and not self.dev_dependencies


def collect_dependencies(items: Iterable[RegistryItem]) -> PackageDependencies:
    """Union every item's package and dev-package dependencies."""
    result = PackageDependencies()
    for item in items:
        result.dependencies.update(item.dependencies)
        result.dev_dependencies.update(item.dev_dependencies)
    return result


def filter_installed(required: Iterable[str], already_installed: Mapping[str, str]) -> list[str]:
    """Return the names in ``required`` that are not installed, sorted.

    Matching is exact: ``react-native`` being installed does not satisfy
    ``react-native-reanimated``.
    """
    return sorted({name for name in required if name not in already_installed})


def read_installed_packages(project_dir: str | Path) -> dict[str, str]:
    """Read ``dependencies`` and ``devDependencies`` from the project's package.json.

    Returns an empty mapping when the project has no package.json.
    """
    path = Path(project_dir) / "package.json"
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ProjectError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectError(f"{path} must contain a JSON object")

    installed: dict[str, str] = {}
    for key in ("devDependencies", "dependencies"):
        section = data.get(key) or {}
        if isinstance(section, dict):
            installed.update(section)
    return installed
