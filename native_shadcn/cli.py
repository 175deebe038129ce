"""native-shadcn CLI — add React Native components from the registry to a project."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from native_shadcn import __version__
from native_shadcn.config import (
    DEFAULT_CONFIG_FILE,
    ProjectConfig,
    RegistryConfig,
    find_project_config,
    load_project_config,
    write_project_config,
)
from native_shadcn.errors import NativeShadcnError
from native_shadcn.installer import (
    detect_package_manager,
    install_command,
    install_packages,
    plan_install,
    write_item,
)
from native_shadcn.registry.dependencies import filter_installed, read_installed_packages
from native_shadcn.registry.fetcher import TemplateFetcher
from native_shadcn.registry.store import RegistryStore
from native_shadcn.scaffold import BASE_DEPENDENCIES, TYPESCRIPT_DEV_DEPENDENCIES, scaffold_project

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/]")
    raise SystemExit(1)


def _load_store(ctx_obj: dict, fetcher: TemplateFetcher) -> RegistryStore:
    index = ctx_obj.get("index")
    if index:
        return RegistryStore.load(index)
    return fetcher.fetch_store()


def _install_missing(
    project_dir: Path,
    dependencies: Iterable[str],
    dev_dependencies: Iterable[str],
    install: bool,
) -> None:
    """Install the packages package.json does not list yet, or print the command."""
    installed = read_installed_packages(project_dir)
    manager = detect_package_manager(project_dir)

    for required, dev in ((dependencies, False), (dev_dependencies, True)):
        packages = filter_installed(required, installed)
        if not packages:
            continue
        if install:
            with console.status(f"Installing {' '.join(packages)}..."):
                install_packages(manager, packages, project_dir, dev=dev)
        else:
            command = " ".join(install_command(manager, packages, dev=dev))
            console.print(f"\nInstall packages with: [cyan]{command}[/]")


@click.group()
@click.version_option(version=__version__)
@click.option("--registry-url", default=None, help="Registry base URL (overrides $REGISTRY_URL)")
@click.option(
    "--index",
    default=None,
    type=click.Path(exists=True),
    help="Use a local index.json instead of fetching it",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def main(ctx: click.Context, registry_url: str | None, index: str | None, verbose: bool):
    """native-shadcn — copy React Native UI components into your project.

    Components are fetched from the registry together with every component
    they depend on, written into your project, and their npm packages are
    installed with your package manager.
    """
    _configure_logging(verbose)
    try:
        config = RegistryConfig.from_env()
        if registry_url:
            config = RegistryConfig(
                base_url=registry_url,
                timeout=config.timeout,
                max_retries=config.max_retries,
            )
    except NativeShadcnError as e:
        _fail(str(e))
    ctx.obj = {"registry": config, "index": index}


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--cwd", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.option("--javascript", is_flag=True, help="The project does not use TypeScript")
@click.option("--install/--no-install", default=True, help="Install the base npm packages")
def init(cwd: str, force: bool, javascript: bool, install: bool):
    """Set up NativeWind and write a components.json with the default settings."""
    project_dir = Path(cwd)
    existing = find_project_config(project_dir, search_parents=False)
    if existing and not force:
        console.print(f"[yellow]{existing.name} already exists.[/] Use --force to overwrite.")
        return

    if not (project_dir / "package.json").is_file():
        _fail("package.json not found. Run this command in a React Native project.")

    config = ProjectConfig(typescript=not javascript)
    console.print("\n[bold blue]native-shadcn[/] — Initializing project\n")

    try:
        path = write_project_config(project_dir, config)
        console.print(f"  [green]v[/] {path.name}")

        result = scaffold_project(project_dir, config)
        root = project_dir.resolve()
        for path in result.written:
            console.print(f"  [green]v[/] {path.resolve().relative_to(root)}")
        for path in result.updated:
            console.print(f"  [green]v[/] {path.resolve().relative_to(root)} (updated)")
        for path in result.skipped:
            console.print(f"  [dim]-[/] {path.resolve().relative_to(root)} (exists)")
        for step in result.manual_steps:
            console.print(f"  [yellow]![/] {step}")

        dev_dependencies = TYPESCRIPT_DEV_DEPENDENCIES if config.typescript else ()
        _install_missing(project_dir, BASE_DEPENDENCIES, dev_dependencies, install)
    except NativeShadcnError as e:
        _fail(str(e))

    console.print("\n[green]Project initialized.[/] Add components with: native-shadcn add button")


# ── List ─────────────────────────────────────────────────────────────


@main.command(name="list")
@click.pass_obj
def list_components(obj: dict):
    """List all components available in the registry."""
    try:
        with TemplateFetcher(obj["registry"]) as fetcher:
            store = _load_store(obj, fetcher)
    except NativeShadcnError as e:
        _fail(str(e))

    if not len(store):
        console.print("[yellow]Registry is empty.[/]")
        return

    table = Table(title=f"Available components ({len(store)})")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Description")

    for item in store:
        table.add_row(item.name, item.type.short_name, item.description[:60])

    console.print(table)
    console.print("\nUsage: native-shadcn add button card input")


# ── View ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("components", nargs=-1, required=True)
@click.pass_obj
def view(obj: dict, components: tuple[str, ...]):
    """Show what adding COMPONENTS would install, in install order."""
    try:
        with TemplateFetcher(obj["registry"]) as fetcher:
            store = _load_store(obj, fetcher)
    except NativeShadcnError as e:
        _fail(str(e))

    plan = plan_install(components, store)

    for name in plan.skipped:
        console.print(f"  [yellow]![/] Component '{name}' not found in registry")

    if not plan.items:
        console.print("[yellow]Nothing to install.[/]")
        return

    table = Table(title=f"Install order ({len(plan.items)} items)")
    table.add_column("#", style="dim", width=3)
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Requires")

    for i, item in enumerate(plan.items):
        table.add_row(
            str(i + 1),
            item.name,
            item.type.short_name,
            ", ".join(item.registry_dependencies),
        )
    console.print(table)

    if plan.packages.dependencies:
        console.print("\n[bold]Dependencies:[/] " + " ".join(sorted(plan.packages.dependencies)))
    if plan.packages.dev_dependencies:
        console.print(
            "[bold]Dev dependencies:[/] " + " ".join(sorted(plan.packages.dev_dependencies))
        )


# ── Add ──────────────────────────────────────────────────────────────


@main.command()
@click.argument("components", nargs=-1)
@click.option("--all", "add_all", is_flag=True, help="Add every component in the registry")
@click.option("--overwrite", is_flag=True, help="Overwrite existing files")
@click.option("--cwd", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--install/--no-install", default=True, help="Install npm packages")
@click.pass_obj
def add(
    obj: dict,
    components: tuple[str, ...],
    add_all: bool,
    overwrite: bool,
    cwd: str,
    install: bool,
):
    """Add COMPONENTS and everything they depend on to the project."""
    project_dir = Path(cwd)

    try:
        project = load_project_config(project_dir)
    except NativeShadcnError as e:
        _fail(str(e))
    if project is None:
        _fail(f"Project not initialized. Run 'native-shadcn init' to create {DEFAULT_CONFIG_FILE}.")

    try:
        with TemplateFetcher(obj["registry"]) as fetcher:
            store = _load_store(obj, fetcher)

            names = store.names() if add_all else list(components)
            if not names:
                _fail("No components given. Pass component names or --all.")

            invalid = [name for name in names if name not in store]
            if invalid:
                console.print("Run 'native-shadcn list' to see all available components.")
                _fail("Invalid components: " + ", ".join(invalid))

            plan = plan_install(names, store)
            console.print(f"\n[bold blue]native-shadcn[/] — Adding {len(plan.items)} components\n")

            for name in plan.skipped:
                console.print(f"  [yellow]![/] Dependency '{name}' not found in registry, skipping")

            for item in plan.items:
                if not item.files:
                    console.print(f"  [yellow]![/] No files defined for {item.name}, skipping")
                    continue

                template = None
                if any(f.content is None for f in item.files):
                    with console.status(f"Fetching {item.name} from registry..."):
                        template = fetcher.fetch_template(item.name)

                result = write_item(item, template, project_dir, project, overwrite=overwrite)
                for path in result.written:
                    console.print(f"  [green]v[/] {path.relative_to(project_dir.resolve())}")
                for path in result.merged:
                    console.print(
                        f"  [green]v[/] {path.relative_to(project_dir.resolve())} (merged cn)"
                    )
                for path in result.skipped:
                    console.print(
                        f"  [dim]-[/] {path.relative_to(project_dir.resolve())} "
                        "(exists, use --overwrite)"
                    )
                if result.missing_content:
                    console.print(f"  [yellow]![/] No template found for {item.name}, skipping")

        _install_missing(
            project_dir, plan.packages.dependencies, plan.packages.dev_dependencies, install
        )
    except NativeShadcnError as e:
        _fail(str(e))

    console.print("\n[green]Done.[/]")


if __name__ == "__main__":
    main()
