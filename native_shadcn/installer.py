"""Installer — turns requested component names into files and packages in a project.

The flow mirrors the ``add`` command:
resolve the closure, order it dependencies first, aggregate package
dependencies, write each item's files with the project's import aliases,
then hand the missing packages to the project's package manager.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from native_shadcn.config import AliasConfig, ProjectConfig
from native_shadcn.errors import ProjectError
from native_shadcn.registry.dependencies import PackageDependencies, collect_dependencies
from native_shadcn.registry.models import RegistryItem, RegistryItemFile, RegistryItemType
from native_shadcn.registry.ordering import sort_by_dependency_order
from native_shadcn.registry.resolver import resolve

logger = logging.getLogger(__name__)

COMPONENTS_DIR = "components"

# Aliases the registry templates are written against.
REGISTRY_ALIASES = AliasConfig()

# Lockfile -> package manager, checked in order.
LOCKFILES = (
    ("package-lock.json", "npm"),
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("bun.lockb", "bun"),
)
DEFAULT_PACKAGE_MANAGER = "npm"

_IMPORT_RE = re.compile(r"""(\bfrom\s+)(['"])([^'"]+)\2""")
_IMPORT_LINE_RE = re.compile(r"""^import\s.*\sfrom\s+['"][^'"]+['"];?[ \t]*\n?""", re.MULTILINE)

# TypeScript suffix -> suffix written into JavaScript projects.
JS_SUFFIXES = {".tsx": ".jsx", ".ts": ".js"}

UTILS_ITEM = "utils"


@dataclass
class InstallPlan:
    """Everything one ``add`` needs, in install order."""

    requested: list[str]
    items: list[RegistryItem] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    packages: PackageDependencies = field(default_factory=PackageDependencies)

    @property
    def names(self) -> list[str]:
        return [item.name for item in self.items]


@dataclass
class WriteResult:
    """Files touched while installing one registry item."""

    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    merged: list[Path] = field(default_factory=list)
    missing_content: list[str] = field(default_factory=list)


def plan_install(names: Iterable[str], store) -> InstallPlan:
    """Resolve, order and aggregate ``names`` against ``store``."""
    requested = list(names)
    resolved = resolve(requested, store)
    ordered = sort_by_dependency_order(list(resolved))
    return InstallPlan(
        requested=requested,
        items=ordered,
        skipped=list(resolved.skipped),
        packages=collect_dependencies(ordered),
    )


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def target_path(
    item: RegistryItem,
    file: RegistryItemFile,
    project_dir: str | Path,
    typescript: bool = True,
) -> Path:
    """Where ``file`` of ``item`` lands inside the project.

    lib files (by type, or by a ``lib/`` path) go under the project root,
    everything else under ``components/``. In a JavaScript project
    ``.tsx``/``.ts`` files are written as ``.jsx``/``.js``.
    """
    root = Path(project_dir).resolve()
    is_lib = file.path.startswith("lib/") or item.file_type(file) is RegistryItemType.LIB
    base = root if is_lib else root / COMPONENTS_DIR

    path = (base / file.path).resolve()
    if not path.is_relative_to(root):
        raise ProjectError(f"Registry file path escapes the project: {file.path}")
    if not typescript and path.suffix in JS_SUFFIXES:
        path = path.with_suffix(JS_SUFFIXES[path.suffix])
    return path


def rewrite_imports(code: str, aliases: AliasConfig) -> str:
    """Point ``from '...'`` specifiers at the project's configured aliases."""
    replacements = [
        (REGISTRY_ALIASES.utils, aliases.utils),
        (REGISTRY_ALIASES.components, aliases.components),
    ]

    def _sub(match: re.Match) -> str:
        prefix, quote, specifier = match.groups()
        for source, target in replacements:
            if specifier == source or specifier.startswith(source + "/"):
                specifier = target + specifier[len(source):]
                break
        return f"{prefix}{quote}{specifier}{quote}"

    return _IMPORT_RE.sub(_sub, code)


def write_item(
    item: RegistryItem,
    content: str | None,
    project_dir: str | Path,
    config: ProjectConfig,
    overwrite: bool = False,
) -> WriteResult:
    """Write every file of ``item`` into the project.

    A file's own content wins; ``content`` (the fetched template) fills in
    for files that carry none, and the ``utils`` item falls back to the
    built-in ``cn()`` helper. Existing files are left alone unless
    ``overwrite`` is set, except an existing utils file without ``cn``,
    which gets the helper merged in.
    """
    result = WriteResult()

    for file in item.files:
        body = file.content if file.content is not None else content
        builtin = body is None and item.name == UTILS_ITEM
        if builtin:
            body = cn_template(config.typescript)
        if body is None:
            logger.warning("No content for %s (%s), skipping", file.path, item.name)
            result.missing_content.append(file.path)
            continue

        path = target_path(item, file, project_dir, typescript=config.typescript)
        if path.exists() and not overwrite:
            if _is_utils_file(item, file) and not has_cn_function(path):
                merge_utils_file(path, cn_template(config.typescript))
                result.merged.append(path)
            else:
                logger.info("%s already exists, skipping", path)
                result.skipped.append(path)
            continue

        if path.suffix != Path(file.path).suffix and not builtin:
            logger.warning(
                "%s is TypeScript source; written to %s without stripping type syntax",
                file.path,
                path.name,
            )
        _write_text(path, rewrite_imports(body, config.aliases))
        result.written.append(path)

    return result


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Could not write {path}: {e}") from e


# ---------------------------------------------------------------------------
# lib/utils and the cn() helper
# ---------------------------------------------------------------------------


def cn_template(typescript: bool) -> str:
    """Source of the ``cn()`` class-name helper every component imports."""
    if typescript:
        return (
            "import { clsx, type ClassValue } from 'clsx';\n"
            "import { twMerge } from 'tailwind-merge';\n"
            "\n"
            "export function cn(...inputs: ClassValue[]) {\n"
            "  return twMerge(clsx(inputs));\n"
            "}\n"
        )
    return (
        "import { clsx } from 'clsx';\n"
        "import { twMerge } from 'tailwind-merge';\n"
        "\n"
        "export function cn(...inputs) {\n"
        "  return twMerge(clsx(inputs));\n"
        "}\n"
    )


def _is_utils_file(item: RegistryItem, file: RegistryItemFile) -> bool:
    return item.name == UTILS_ITEM and "utils" in file.path


def has_cn_function(path: str | Path) -> bool:
    """Whether the file at ``path`` already exports ``cn``. False if unreadable."""
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError:
        return False
    return "export function cn" in source or "export const cn" in source


def merge_cn_function(existing: str, cn_source: str) -> str:
    """Add the imports and body of ``cn_source`` to ``existing`` source.

    Imports not already present go on top, the helper itself at the end.
    """
    imports = [m.group(0).strip() for m in _IMPORT_LINE_RE.finditer(cn_source)]
    body = _IMPORT_LINE_RE.sub("", cn_source).strip()

    missing = [statement for statement in imports if statement not in existing]
    merged = existing
    if missing:
        merged = "\n".join(missing) + "\n" + merged
    return merged.rstrip() + "\n\n" + body + "\n"


def merge_utils_file(path: str | Path, cn_source: str) -> bool:
    """Make sure the utils file at ``path`` exports ``cn``.

    Creates the file when it is missing and merges the helper into it when
    it exists without one. Returns False when ``cn`` was already there.
    """
    path = Path(path)
    if not path.exists():
        _write_text(path, cn_source)
        return True
    if has_cn_function(path):
        return False

    try:
        existing = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Could not read {path}: {e}") from e
    logger.info("Merging cn() into %s", path)
    _write_text(path, merge_cn_function(existing, cn_source))
    return True


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------


def detect_package_manager(project_dir: str | Path) -> str:
    """Pick the package manager from the project's lockfile (npm by default)."""
    root = Path(project_dir)
    for lockfile, manager in LOCKFILES:
        if (root / lockfile).exists():
            return manager
    return DEFAULT_PACKAGE_MANAGER


def install_command(manager: str, packages: Iterable[str], dev: bool = False) -> list[str]:
    command = [manager, "install" if manager == "npm" else "add"]
    if dev:
        command.append("-D")
    command.extend(packages)
    return command


def install_packages(
    manager: str,
    packages: list[str],
    project_dir: str | Path,
    dev: bool = False,
) -> None:
    """Install ``packages`` with ``manager`` in ``project_dir``. No-op when empty."""
    if not packages:
        return

    command = install_command(manager, packages, dev=dev)
    logger.info("Running: %s", " ".join(command))
    try:
        proc = subprocess.run(
            command,
            cwd=project_dir,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise ProjectError(f"Could not run {manager}: {e}") from e

    if proc.returncode != 0:
        raise ProjectError(
            f"'{' '.join(command)}' failed with exit code {proc.returncode}: "
            f"{proc.stderr.strip()}"
        )
