"""Tests for the native-shadcn CLI."""

import json
import subprocess
import tempfile
from pathlib import Path

import httpx
from click.testing import CliRunner

from native_shadcn import cli, installer
from native_shadcn.cli import main
from native_shadcn.registry.fetcher import TemplateFetcher

INDEX = [
    {
        "name": "utils",
        "type": "registry:lib",
        "description": "The cn() class name helper",
        "dependencies": ["clsx", "tailwind-merge"],
        "files": [{"path": "lib/utils.ts", "content": "export function cn() {}\n", "type": "registry:lib"}],
    },
    {
        "name": "button",
        "type": "registry:ui",
        "description": "A pressable button",
        "dependencies": ["class-variance-authority"],
        "registryDependencies": ["utils"],
        "files": [
            {
                "path": "ui/button.tsx",
                "content": "import { cn } from '@/lib/utils';\nexport function Button() {}\n",
                "type": "registry:ui",
            }
        ],
    },
]


def _write_index(tmpdir: str) -> str:
    path = Path(tmpdir) / "index.json"
    path.write_text(json.dumps(INDEX))
    return str(path)


def _init_project(tmpdir: str, **config) -> Path:
    project = Path(tmpdir) / "app"
    project.mkdir()
    (project / "components.json").write_text(json.dumps(config))
    (project / "package.json").write_text(json.dumps({"dependencies": {"clsx": "^2.1.0"}}))
    return project


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output


def test_init_writes_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "package.json").write_text("{}")
        result = CliRunner().invoke(main, ["init", "--cwd", tmpdir, "--no-install"])
        assert result.exit_code == 0, result.output
        data = json.loads((Path(tmpdir) / "components.json").read_text())
        assert data["aliases"]["components"] == "@/components"


def test_init_keeps_existing_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "components.json").write_text('{"typescript": false}')
        result = CliRunner().invoke(main, ["init", "--cwd", tmpdir])
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert json.loads((Path(tmpdir) / "components.json").read_text()) == {"typescript": False}


def test_list_from_local_index():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(main, ["--index", _write_index(tmpdir), "list"])
        assert result.exit_code == 0
        assert "button" in result.output
        assert "utils" in result.output


def test_view_shows_install_order():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(main, ["--index", _write_index(tmpdir), "view", "button", "ghost"])
        assert result.exit_code == 0
        assert "'ghost' not found" in result.output
        assert result.output.index("utils") < result.output.index("button")
        assert "class-variance-authority" in result.output


def test_add_writes_files_with_aliases():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = _init_project(tmpdir, aliases={"utils": "~/lib/utils"})
        result = CliRunner().invoke(
            main,
            ["--index", _write_index(tmpdir), "add", "button", "--cwd", str(project), "--no-install"],
        )

        assert result.exit_code == 0, result.output
        assert (project / "lib" / "utils.ts").read_text() == "export function cn() {}\n"
        button = (project / "components" / "ui" / "button.tsx").read_text()
        assert "from '~/lib/utils'" in button
        assert "class-variance-authority" in result.output
        assert "clsx" not in result.output
        assert "Done." in result.output


def test_add_requires_initialized_project():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(
            main, ["--index", _write_index(tmpdir), "add", "button", "--cwd", tmpdir]
        )
        assert result.exit_code == 1
        assert "not initialized" in result.output


def test_add_rejects_unknown_component():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = _init_project(tmpdir)
        result = CliRunner().invoke(
            main,
            ["--index", _write_index(tmpdir), "add", "nonexistent", "--cwd", str(project)],
        )
        assert result.exit_code == 1
        assert "Invalid components: nonexistent" in result.output
        assert not (project / "components").exists()


def test_add_requires_component_names():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = _init_project(tmpdir)
        result = CliRunner().invoke(
            main, ["--index", _write_index(tmpdir), "add", "--cwd", str(project)]
        )
        assert result.exit_code == 1
        assert "No components given" in result.output


def test_corrupt_index_is_reported():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "index.json"
        path.write_text("not json")
        result = CliRunner().invoke(main, ["--index", str(path), "list"])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


# --- init scaffolding ---


def test_init_scaffolds_project():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "package.json").write_text("{}")
        result = CliRunner().invoke(main, ["init", "--cwd", tmpdir, "--no-install"])

        assert result.exit_code == 0, result.output
        assert "presets: [require('nativewind/preset')]" in (root / "tailwind.config.js").read_text()
        assert "--primary: 240 5.9% 10%;" in (root / "global.css").read_text()
        assert "export function cn(...inputs: ClassValue[])" in (root / "lib" / "utils.ts").read_text()
        assert (root / "components" / "ui").is_dir()
        assert "nativewind/babel" in (root / "babel.config.js").read_text()
        assert (root / "nativewind-env.d.ts").read_text() == '/// <reference types="nativewind/types" />\n'
        assert "path aliases to tsconfig.json" in result.output
        assert "npm install" in result.output
        assert "nativewind" in result.output


def test_init_keeps_existing_files_and_patches_configs():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "package.json").write_text("{}")
        (root / "tailwind.config.js").write_text("module.exports = {};\n")
        (root / "lib").mkdir()
        (root / "lib" / "utils.ts").write_text("export const sleep = (ms: number) => ms;\n")
        (root / "babel.config.js").write_text("module.exports = {\n  plugins: ['other'],\n};\n")
        (root / "tsconfig.json").write_text(json.dumps({"compilerOptions": {"strict": True}}))

        result = CliRunner().invoke(main, ["init", "--cwd", tmpdir, "--no-install"])

        assert result.exit_code == 0, result.output
        assert (root / "tailwind.config.js").read_text() == "module.exports = {};\n"
        utils = (root / "lib" / "utils.ts").read_text()
        assert "export const sleep" in utils
        assert "export function cn" in utils
        babel = (root / "babel.config.js").read_text()
        assert '"nativewind/babel"' in babel
        assert "'other'" in babel
        tsconfig = json.loads((root / "tsconfig.json").read_text())
        assert tsconfig["compilerOptions"]["strict"] is True
        assert tsconfig["compilerOptions"]["paths"]["@/components/*"] == ["./components/*"]


def test_init_javascript_project():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "package.json").write_text("{}")
        result = CliRunner().invoke(main, ["init", "--cwd", tmpdir, "--javascript", "--no-install"])

        assert result.exit_code == 0, result.output
        assert json.loads((root / "components.json").read_text())["typescript"] is False
        assert "export function cn(...inputs) {" in (root / "lib" / "utils.js").read_text()
        assert not (root / "lib" / "utils.ts").exists()
        assert not (root / "nativewind-env.d.ts").exists()
        assert "@types/react" not in result.output


def test_init_requires_package_json():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(main, ["init", "--cwd", tmpdir, "--no-install"])
        assert result.exit_code == 1
        assert "package.json not found" in result.output
        assert not (Path(tmpdir) / "components.json").exists()


def test_init_installs_missing_base_packages(monkeypatch):
    calls = []

    def fake_run(command, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(installer.subprocess, "run", fake_run)

    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "package.json").write_text(json.dumps({"dependencies": {"clsx": "^2.1.0"}}))
        result = CliRunner().invoke(main, ["init", "--cwd", tmpdir])

        assert result.exit_code == 0, result.output
        assert calls == [
            [
                "npm",
                "install",
                "class-variance-authority",
                "nativewind",
                "react-native-gesture-handler",
                "react-native-reanimated",
                "tailwind-merge",
                "tailwindcss",
            ],
            ["npm", "install", "-D", "@types/react", "@types/react-native"],
        ]


# --- add with templates fetched from the registry ---

REGISTRY_URL = "https://registry.test/registry"

REMOTE_INDEX = [
    {
        "name": "utils",
        "type": "registry:lib",
        "dependencies": ["clsx", "tailwind-merge"],
        "files": ["lib/utils.ts"],
    },
    {
        "name": "button",
        "type": "registry:ui",
        "registryDependencies": ["utils"],
        "files": ["ui/button.tsx"],
    },
    {"name": "badge", "type": "registry:ui", "files": ["ui/badge.tsx"]},
]

REMOTE_RECORDS = {
    "index.json": REMOTE_INDEX,
    "utils.json": {
        "name": "utils",
        "type": "registry:lib",
        "files": [{"path": "lib/utils.ts", "content": "export function cn() {}\n", "type": "registry:lib"}],
    },
    "button.json": {
        "name": "button",
        "type": "registry:ui",
        "files": [
            {
                "path": "ui/button.tsx",
                "content": "import { cn } from '@/lib/utils';\nexport function Button() {}\n",
                "type": "registry:ui",
            }
        ],
    },
}


def _serve_registry(monkeypatch) -> list[str]:
    """Route the CLI's fetcher to an in-memory registry; return requested paths."""
    requested: list[str] = []
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        record = REMOTE_RECORDS.get(request.url.path.rsplit("/", 1)[-1])
        if record is None:
            return httpx.Response(404)
        return httpx.Response(200, json=record)

    def fetcher(config):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return TemplateFetcher(config, client=client, sleep=sleeps.append)

    monkeypatch.setattr(cli, "TemplateFetcher", fetcher)
    return requested


def test_add_fetches_templates_from_registry(monkeypatch):
    requested = _serve_registry(monkeypatch)

    with tempfile.TemporaryDirectory() as tmpdir:
        project = _init_project(tmpdir, aliases={"utils": "~/lib/utils"})
        result = CliRunner().invoke(
            main,
            ["--registry-url", REGISTRY_URL, "add", "button", "--cwd", str(project), "--no-install"],
            env={"REGISTRY_MAX_RETRIES": "0"},
        )

        assert result.exit_code == 0, result.output
        assert requested == [
            "/registry/index.json",
            "/registry/utils.json",
            "/registry/button.json",
        ]
        assert (project / "lib" / "utils.ts").read_text() == "export function cn() {}\n"
        assert "from '~/lib/utils'" in (project / "components" / "ui" / "button.tsx").read_text()
        assert "No template found" not in result.output
        assert "Done." in result.output


def test_add_skips_component_without_template(monkeypatch):
    requested = _serve_registry(monkeypatch)

    with tempfile.TemporaryDirectory() as tmpdir:
        project = _init_project(tmpdir)
        result = CliRunner().invoke(
            main,
            ["--registry-url", REGISTRY_URL, "add", "badge", "--cwd", str(project), "--no-install"],
            env={"REGISTRY_MAX_RETRIES": "0"},
        )

        assert result.exit_code == 0, result.output
        assert requested.count("/registry/badge.json") == 1
        assert "No template found for badge, skipping" in result.output
        assert not (project / "components" / "ui" / "badge.tsx").exists()


def test_add_merges_cn_into_existing_utils():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = _init_project(tmpdir)
        (project / "lib").mkdir()
        (project / "lib" / "utils.ts").write_text("export const sleep = (ms: number) => ms;\n")

        result = CliRunner().invoke(
            main,
            ["--index", _write_index(tmpdir), "add", "button", "--cwd", str(project), "--no-install"],
        )

        assert result.exit_code == 0, result.output
        utils = (project / "lib" / "utils.ts").read_text()
        assert utils.startswith("import { clsx, type ClassValue } from 'clsx';\n")
        assert "export const sleep" in utils
        assert "export function cn(...inputs: ClassValue[])" in utils
        assert "merged cn" in result.output


def test_add_javascript_project_writes_jsx():
    with tempfile.TemporaryDirectory() as tmpdir:
        project = _init_project(tmpdir, typescript=False)
        result = CliRunner().invoke(
            main,
            ["--index", _write_index(tmpdir), "add", "button", "--cwd", str(project), "--no-install"],
        )

        assert result.exit_code == 0, result.output
        assert (project / "components" / "ui" / "button.jsx").exists()
        assert not (project / "components" / "ui" / "button.tsx").exists()
        assert (project / "lib" / "utils.js").exists()
