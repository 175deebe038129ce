"""Project scaffolding — the files ``init`` sets up in a React Native project.

Writes the Tailwind config, the global stylesheet with the theme variables,
``lib/utils`` with the ``cn()`` helper, the NativeWind babel plugin and (for
TypeScript projects) the NativeWind type reference and tsconfig path
aliases. Files that already exist are left alone; the ones that must be
edited in place (babel.config.js, tsconfig.json, lib/utils) are patched
only when the needed entry is missing.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from native_shadcn.config import ProjectConfig
from native_shadcn.errors import ProjectError
from native_shadcn.installer import COMPONENTS_DIR, cn_template, merge_utils_file

logger = logging.getLogger(__name__)

BASE_DEPENDENCIES = (
    "nativewind",
    "tailwindcss",
    "react-native-reanimated",
    "react-native-gesture-handler",
    "class-variance-authority",
    "clsx",
    "tailwind-merge",
)
TYPESCRIPT_DEV_DEPENDENCIES = ("@types/react", "@types/react-native")

BABEL_CONFIG_FILE = "babel.config.js"
BABEL_PLUGIN = "nativewind/babel"
NATIVEWIND_ENV_FILE = "nativewind-env.d.ts"
TSCONFIG_FILE = "tsconfig.json"

TAILWIND_CONFIG = """\
/** @type {import('tailwindcss').Config} */
module.exports = {
  content: [
    './App.{js,jsx,ts,tsx}',
    './app/**/*.{js,jsx,ts,tsx}',
    './src/**/*.{js,jsx,ts,tsx}',
    './components/**/*.{js,jsx,ts,tsx}',
  ],
  presets: [require('nativewind/preset')],
  theme: {
    extend: {
      colors: {
        border: 'hsl(var(--border))',
        input: 'hsl(var(--input))',
        ring: 'hsl(var(--ring))',
        background: 'hsl(var(--background))',
        foreground: 'hsl(var(--foreground))',
        primary: {
          DEFAULT: 'hsl(var(--primary))',
          foreground: 'hsl(var(--primary-foreground))',
        },
        secondary: {
          DEFAULT: 'hsl(var(--secondary))',
          foreground: 'hsl(var(--secondary-foreground))',
        },
        destructive: {
          DEFAULT: 'hsl(var(--destructive))',
          foreground: 'hsl(var(--destructive-foreground))',
        },
        muted: {
          DEFAULT: 'hsl(var(--muted))',
          foreground: 'hsl(var(--muted-foreground))',
        },
        accent: {
          DEFAULT: 'hsl(var(--accent))',
          foreground: 'hsl(var(--accent-foreground))',
        },
        popover: {
          DEFAULT: 'hsl(var(--popover))',
          foreground: 'hsl(var(--popover-foreground))',
        },
        card: {
          DEFAULT: 'hsl(var(--card))',
          foreground: 'hsl(var(--card-foreground))',
        },
      },
      borderRadius: {
        lg: 'var(--radius)',
        md: 'calc(var(--radius) - 2px)',
        sm: 'calc(var(--radius) - 4px)',
      },
    },
  },
  plugins: [],
};
"""

_LIGHT_THEME = {
    "background": "0 0% 100%",
    "foreground": "240 10% 3.9%",
    "card": "0 0% 100%",
    "card-foreground": "240 10% 3.9%",
    "popover": "0 0% 100%",
    "popover-foreground": "240 10% 3.9%",
    "primary": "240 5.9% 10%",
    "primary-foreground": "0 0% 98%",
    "secondary": "240 4.8% 95.9%",
    "secondary-foreground": "240 5.9% 10%",
    "muted": "240 4.8% 95.9%",
    "muted-foreground": "240 3.8% 46.1%",
    "accent": "240 4.8% 95.9%",
    "accent-foreground": "240 5.9% 10%",
    "destructive": "0 84.2% 60.2%",
    "destructive-foreground": "0 0% 98%",
    "border": "240 5.9% 90%",
    "input": "240 5.9% 90%",
    "ring": "240 5.9% 10%",
    "radius": "0.5rem",
}

_DARK_THEME = {
    "background": "240 10% 3.9%",
    "foreground": "0 0% 98%",
    "card": "240 10% 3.9%",
    "card-foreground": "0 0% 98%",
    "popover": "240 10% 3.9%",
    "popover-foreground": "0 0% 98%",
    "primary": "0 0% 98%",
    "primary-foreground": "240 5.9% 10%",
    "secondary": "240 3.7% 15.9%",
    "secondary-foreground": "0 0% 98%",
    "muted": "240 3.7% 15.9%",
    "muted-foreground": "240 5% 64.9%",
    "accent": "240 3.7% 15.9%",
    "accent-foreground": "0 0% 98%",
    "destructive": "0 62.8% 30.6%",
    "destructive-foreground": "0 0% 98%",
    "border": "240 3.7% 15.9%",
    "input": "240 3.7% 15.9%",
    "ring": "240 4.9% 83.9%",
}

BABEL_CONFIG = """\
module.exports = function (api) {
  api.cache(true);
  return {
    presets: ['babel-preset-expo'],
    plugins: ['nativewind/babel'],
  };
};
"""

NATIVEWIND_ENV = '/// <reference types="nativewind/types" />\n'

_PLUGINS_RE = re.compile(r"(plugins:\s*\[)")
_EXPORTS_OBJECT_RE = re.compile(r"(module\.exports\s*=\s*\{)")
_RETURN_OBJECT_RE = re.compile(r"(return\s*\{)")


def _css_block(selector: str, variables: dict[str, str]) -> str:
    lines = [f"  {selector} {{"]
    lines.extend(f"    --{name}: {value};" for name, value in variables.items())
    lines.append("  }")
    return "\n".join(lines)


def global_css() -> str:
    """Tailwind layers plus the light and dark theme variables."""
    return (
        "@tailwind base;\n"
        "@tailwind components;\n"
        "@tailwind utilities;\n"
        "\n"
        "@layer base {\n"
        f"{_css_block(':root', _LIGHT_THEME)}\n"
        "\n"
        f"{_css_block('.dark', _DARK_THEME)}\n"
        "}\n"
    )


@dataclass
class ScaffoldResult:
    """What ``scaffold_project`` did, for reporting."""

    written: list[Path] = field(default_factory=list)
    updated: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    manual_steps: list[str] = field(default_factory=list)


def scaffold_project(project_dir: str | Path, config: ProjectConfig) -> ScaffoldResult:
    """Set up NativeWind and the shared helpers in ``project_dir``."""
    root = Path(project_dir)
    result = ScaffoldResult()

    _write_new(root / config.tailwind.config, TAILWIND_CONFIG, result)
    _write_new(root / config.tailwind.css, global_css(), result)

    utils = root / "lib" / ("utils.ts" if config.typescript else "utils.js")
    existed = utils.exists()
    if merge_utils_file(utils, cn_template(config.typescript)):
        (result.updated if existed else result.written).append(utils)
    else:
        result.skipped.append(utils)

    try:
        (root / COMPONENTS_DIR / "ui").mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProjectError(f"Could not create {COMPONENTS_DIR}/ui: {e}") from e

    _configure_babel(root / BABEL_CONFIG_FILE, result)

    if config.typescript:
        _write_new(root / NATIVEWIND_ENV_FILE, NATIVEWIND_ENV, result)
        _configure_tsconfig(root / TSCONFIG_FILE, config, result)

    return result


def _write_new(path: Path, text: str, result: ScaffoldResult) -> None:
    if path.exists():
        logger.info("%s already exists, skipping", path)
        result.skipped.append(path)
        return
    _write(path, text)
    result.written.append(path)


def _write(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Could not write {path}: {e}") from e


# ---------------------------------------------------------------------------
# babel.config.js
# ---------------------------------------------------------------------------


def add_babel_plugin(source: str) -> str | None:
    """Add the NativeWind plugin to babel config ``source``.

    Returns the patched source, ``source`` unchanged if the plugin is
    already there, or None when there is no place to put it.
    """
    if BABEL_PLUGIN in source:
        return source
    if _PLUGINS_RE.search(source):
        return _PLUGINS_RE.sub(rf'\1\n    "{BABEL_PLUGIN}",', source, count=1)
    for pattern in (_EXPORTS_OBJECT_RE, _RETURN_OBJECT_RE):
        if pattern.search(source):
            return pattern.sub(rf'\1\n    plugins: ["{BABEL_PLUGIN}"],', source, count=1)
    return None


def _configure_babel(path: Path, result: ScaffoldResult) -> None:
    if not path.exists():
        _write(path, BABEL_CONFIG)
        result.written.append(path)
        return

    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Could not read {path}: {e}") from e
    patched = add_babel_plugin(source)
    if patched is None:
        result.manual_steps.append(f'Add "{BABEL_PLUGIN}" to the plugins of {path.name}')
    elif patched == source:
        result.skipped.append(path)
    else:
        _write(path, patched)
        result.updated.append(path)


# ---------------------------------------------------------------------------
# tsconfig.json
# ---------------------------------------------------------------------------


def _alias_target(alias: str) -> str:
    return "./" + re.sub(r"^@/", "", alias)


def _configure_tsconfig(path: Path, config: ProjectConfig, result: ScaffoldResult) -> None:
    manual = f"Add the {config.aliases.components} and @/lib path aliases to {path.name}"
    if not path.exists():
        result.manual_steps.append(manual)
        return

    try:
        tsconfig = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        result.manual_steps.append(manual)
        return
    if not isinstance(tsconfig, dict):
        result.manual_steps.append(manual)
        return

    options = tsconfig.setdefault("compilerOptions", {})
    options.setdefault("baseUrl", ".")
    paths = options.setdefault("paths", {})
    paths[f"{config.aliases.components}/*"] = [f"{_alias_target(config.aliases.components)}/*"]
    paths["@/lib/*"] = ["./lib/*"]

    _write(path, json.dumps(tsconfig, indent=2) + "\n")
    result.updated.append(path)
