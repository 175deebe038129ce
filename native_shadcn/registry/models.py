"""Registry data models — items, files, and resolution results.

Registry items arrive as JSON (one ``{name}.json`` per component, plus an
``index.json`` listing all of them). They are validated strictly on the way
in; a record that does not match the schema raises ``RegistryItemError``
instead of being patched up with defaults at every call site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from native_shadcn.errors import RegistryItemError


class RegistryItemType(str, Enum):
    """Kind of installable unit. Decides the default install location."""

    UI = "registry:ui"
    LIB = "registry:lib"

    @property
    def short_name(self) -> str:
        return self.value.split(":", 1)[1]


class RegistryItemFile(BaseModel):
    """One file of a registry item.

    ``content`` is absent in ``index.json`` and present in per-item records.
    ``type`` overrides the owning item's type for this file only.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1)
    content: str | None = None
    type: RegistryItemType | None = None


class RegistryItem(BaseModel):
    """A single installable unit (a UI component or a lib file)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    type: RegistryItemType
    description: str = ""
    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = Field(default=(), alias="devDependencies")
    registry_dependencies: tuple[str, ...] = Field(default=(), alias="registryDependencies")
    files: tuple[RegistryItemFile, ...] = ()

    @field_validator("files", mode="before")
    @classmethod
    def _normalize_index_files(cls, value: Any) -> Any:
        # index.json lists files as bare paths
        if isinstance(value, (list, tuple)):
            return [{"path": f} if isinstance(f, str) else f for f in value]
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value: Any) -> Any:
        return "" if value is None else value

    def file_type(self, file: RegistryItemFile) -> RegistryItemType:
        """Effective type of ``file``: its own override, else the item's."""
        return file.type or self.type

    def to_wire(self) -> dict[str, Any]:
        """Serialize back to the camelCase JSON wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_registry_item(data: Any) -> RegistryItem:
    """Validate a decoded JSON record into a :class:`RegistryItem`.

    Raises:
        RegistryItemError: if the record does not match the wire schema.
    """
    try:
        return RegistryItem.model_validate(data)
    except ValidationError as e:
        name = data.get("name", "?") if isinstance(data, dict) else "?"
        raise RegistryItemError(f"Invalid registry item '{name}': {e}") from e


@dataclass
class ResolvedSet:
    """Result of one dependency resolution.

    ``items`` preserves breadth-first discovery order (not install order).
    ``skipped`` lists requested or referenced names that were not found in
    the store, each once, in the order they were encountered.
    """

    items: dict[str, RegistryItem] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[RegistryItem]:
        return iter(self.items.values())

    def __contains__(self, name: object) -> bool:
        return name in self.items

    def get(self, name: str) -> RegistryItem | None:
        return self.items.get(name)

    def names(self) -> list[str]:
        return list(self.items)
