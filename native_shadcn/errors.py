"""Exception hierarchy for native-shadcn.

Graph-shape problems (cycles, dangling dependency names) are never errors;
only the conditions below propagate to callers.
"""

from __future__ import annotations


class NativeShadcnError(Exception):
    """Base class for all native-shadcn errors."""


class ConfigError(NativeShadcnError):
    """Invalid environment or project configuration."""


class ProjectError(NativeShadcnError):
    """The target project could not be read (e.g. a corrupt package.json)."""


class RegistryError(NativeShadcnError):
    """Base class for registry errors."""


class RegistryLoadError(RegistryError):
    """A registry store could not be read or is corrupt. Fatal to the caller."""


class RegistryItemError(RegistryError):
    """A registry item record does not match the wire schema."""


class FetchError(RegistryError):
    """A registry request failed in transport or returned a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
