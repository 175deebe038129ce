"""Install order — dependencies before the items that require them."""

from __future__ import annotations

from typing import Iterator, Sequence

from native_shadcn.registry.models import RegistryItem


def sort_by_dependency_order(items: Sequence[RegistryItem]) -> list[RegistryItem]:
    """Topologically sort ``items`` (dependencies first).

    Only the given items are considered: a registry dependency that is not
    in ``items`` is skipped. Independent items keep their input order, and
    a cycle stops at the member that was already visited.

    The walk is an iterative depth-first post-order, so arbitrarily long
    dependency chains do not hit the interpreter's recursion limit.
    """
    by_name: dict[str, RegistryItem] = {}
    for item in items:
        by_name.setdefault(item.name, item)

    ordered: list[RegistryItem] = []
    visited: set[str] = set()

    for root in items:
        if root.name in visited:
            continue
        visited.add(root.name)
        stack: list[tuple[RegistryItem, Iterator[str]]] = [
            (root, iter(root.registry_dependencies))
        ]

        while stack:
            item, pending = stack[-1]
            for dep_name in pending:
                dep = by_name.get(dep_name)
                if dep is not None and dep.name not in visited:
                    visited.add(dep.name)
                    stack.append((dep, iter(dep.registry_dependencies)))
                    break
            else:
                stack.pop()
                ordered.append(item)

    return ordered
