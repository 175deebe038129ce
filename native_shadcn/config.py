"""Configuration — registry endpoint settings and the project's components.json.

Registry settings come from the environment once, at construction, and are
then passed explicitly to the fetchers. Project settings live in a JSON file
at the root of the consumer's React Native project.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping

from pydantic import BaseModel, Field, ValidationError

from native_shadcn.errors import ConfigError

DEFAULT_REGISTRY_URL = "https://native-shadcn-ui.netlify.app/registry"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 2

ENV_REGISTRY_URL = "REGISTRY_URL"
ENV_REGISTRY_TIMEOUT = "REGISTRY_TIMEOUT"
ENV_REGISTRY_MAX_RETRIES = "REGISTRY_MAX_RETRIES"

# Searched in order; the first one found wins.
CONFIG_FILES = ("native-shadcn.json", "native-shadcn.config.json", "components.json")
DEFAULT_CONFIG_FILE = "components.json"


# ---------------------------------------------------------------------------
# Registry endpoint
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistryConfig:
    """Where and how to reach the component registry."""

    base_url: str = DEFAULT_REGISTRY_URL
    timeout: float = DEFAULT_TIMEOUT  # seconds, per request
    max_retries: int = DEFAULT_MAX_RETRIES

    def __post_init__(self):
        if not self.base_url:
            raise ConfigError("Registry URL must not be empty")
        if self.timeout <= 0:
            raise ConfigError(f"Registry timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ConfigError(f"Registry max retries must be >= 0, got {self.max_retries}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RegistryConfig:
        """Build a config from ``REGISTRY_URL`` and friends, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get(ENV_REGISTRY_URL) or DEFAULT_REGISTRY_URL,
            timeout=_env_number(env, ENV_REGISTRY_TIMEOUT, float, DEFAULT_TIMEOUT),
            max_retries=_env_number(env, ENV_REGISTRY_MAX_RETRIES, int, DEFAULT_MAX_RETRIES),
        )


def _env_number(env: Mapping[str, str], key: str, cast, default):
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got '{raw}'") from None


# ---------------------------------------------------------------------------
# Project config (components.json)
# ---------------------------------------------------------------------------


class TailwindConfig(BaseModel):
    config: str = "tailwind.config.js"
    css: str = "global.css"


class AliasConfig(BaseModel):
    components: str = "@/components"
    utils: str = "@/lib/utils"


class ProjectConfig(BaseModel):
    """Contents of the project's components.json."""

    style: Literal["nativewind"] = "nativewind"
    typescript: bool = True
    tailwind: TailwindConfig = Field(default_factory=TailwindConfig)
    aliases: AliasConfig = Field(default_factory=AliasConfig)


def find_project_config(cwd: str | Path, search_parents: bool = True) -> Path | None:
    """Return the first config file found in ``cwd`` or, failing that, its parents.

    The nearest directory wins; within a directory ``CONFIG_FILES`` order
    decides. With ``search_parents=False`` only ``cwd`` itself is checked.
    """
    start = Path(cwd).resolve()
    directories = [start, *start.parents] if search_parents else [start]
    for directory in directories:
        for name in CONFIG_FILES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def load_project_config(cwd: str | Path) -> ProjectConfig | None:
    """Load the project config from ``cwd``.

    Returns None when the project has not been initialized.
    Raises ConfigError when a config file exists but is invalid.
    """
    path = find_project_config(cwd)
    if path is None:
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid project config {path}: {e}") from e


def write_project_config(cwd: str | Path, config: ProjectConfig) -> Path:
    """Write ``config`` to components.json in ``cwd`` and return the path."""
    path = Path(cwd) / DEFAULT_CONFIG_FILE
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.model_dump(mode="json"), f, indent=2)
        f.write("\n")
    return path
