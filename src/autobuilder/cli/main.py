"""
Auto builder CLI - Main entry point.

Resolves a Java/Kotlin source tree and writes either a project descriptor
(simple mode) or a self-contained portable project (portable mode).
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from autobuilder.config.loader import (
    ConfigurationError,
    create_default_config,
    generate_default_config,
    load_config_from_yaml,
)
from autobuilder.config.models import AutoBuilderConfig, BuildMode
from autobuilder.orchestrator import resolve_project
from autobuilder.portable.creator import PortableProjectCreator, PortabilityTargetInvalid
from autobuilder.project.models import Project
from autobuilder.project.persistence import dump_project
from autobuilder.toolchain.selector import ToolchainSelector

app = typer.Typer(
    name="autobuilder",
    help="Build JVM projects and harvest their classes, dependencies and JDK",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================


def validate_path(path: str, must_exist: bool = True) -> Path:
    """Validate and return a Path object."""
    p = Path(path)
    if must_exist and not p.exists():
        raise typer.BadParameter(f"Path does not exist: {path}")
    return p


def configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(name)s: %(message)s")


def load_config(config: Optional[str]) -> AutoBuilderConfig:
    if config:
        console.print(f"[cyan]Loading configuration from {config}...[/cyan]")
        return load_config_from_yaml(Path(config))
    return create_default_config()


def display_project(project: Project) -> None:
    """Display a summary of the resolved project tree."""
    table = Table(title="Resolved Project", show_header=True)
    table.add_column("Source root", style="cyan")
    table.add_column("JDK")
    table.add_column("Modules", justify="right")
    table.add_column("Dependencies", justify="right")
    table.add_column("Errors", justify="right")

    for p in project.all_projects():
        table.add_row(
            str(p.source_root),
            str(p.java_toolchain) if p.java_toolchain else "-",
            str(len(p.modules)),
            str(len(p.dependencies)),
            f"[red]{len(p.errors)}[/red]" if p.errors else "0",
        )

    console.print(table)


def check_mode_options(
    build: BuildMode, result: Optional[str], result_dir: Optional[str]
) -> Path:
    """Return the output path of the chosen mode, rejecting the other mode's option."""
    if build == BuildMode.SIMPLE:
        if result_dir:
            raise typer.BadParameter("--result-dir is only valid with --build portable")
        if not result:
            raise typer.BadParameter("--result is required with --build simple")
        return Path(result)

    if result:
        raise typer.BadParameter("--result is only valid with --build simple")
    if not result_dir:
        raise typer.BadParameter("--result-dir is required with --build portable")
    return Path(result_dir)


# =============================================================================
# Commands
# =============================================================================


@app.command("build")
def build_project(
    project_root: str = typer.Option(..., "--project-root", help="Project root directory"),
    build_dir: Optional[str] = typer.Option(
        None, "--build-dir", help="Project resolver (builder) working directory"
    ),
    build: BuildMode = typer.Option(
        BuildMode.SIMPLE, "--build", case_sensitive=False, help="Build mode (simple/portable)"
    ),
    result: Optional[str] = typer.Option(
        None, "--result", help="Resolved project descriptor (yaml), simple mode"
    ),
    result_dir: Optional[str] = typer.Option(
        None, "--result-dir", help="Portable project build result directory, portable mode"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Stream build tool output"),
):
    """
    Resolve a project and write its descriptor or a portable copy.

    Examples:
        autobuilder build --project-root ./app --result ./app-project.yaml
        autobuilder build --project-root ./app --build portable --result-dir ./app-portable
    """
    configure_logging(verbose)

    root = validate_path(project_root)
    if not root.is_dir():
        raise typer.BadParameter(f"Not a directory: {project_root}")
    root = root.resolve()
    output = check_mode_options(build, result, result_dir)

    try:
        cfg = load_config(config)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(1)

    work_dir = Path(build_dir) if build_dir else Path(tempfile.mkdtemp(prefix="resolver"))
    logger.info(f"Run auto build resolver at {root}")

    project = resolve_project(root, work_dir.absolute(), cfg)
    if project is None:
        console.print(f"[bold red]No buildable projects found at {root}[/bold red]")
        raise typer.Exit(1)

    display_project(project)

    if build == BuildMode.SIMPLE:
        dump_project(project, output)
        console.print(f"[green]✓[/green] Project descriptor written to {output}")
        return

    try:
        descriptor = PortableProjectCreator(output, project).create()
    except PortabilityTargetInvalid as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Portable project written to {descriptor.parent}")


@app.command()
def init(
    output: str = typer.Option("./autobuilder.yaml", "--output", "-o", help="Output path for config file"),
):
    """
    Generate a default configuration file.

    JDK homes left empty are taken from JAVA_HOME, JAVA_8_HOME,
    JAVA_LATEST_HOME, JAVA_17_HOME and JAVA_11_HOME.
    """
    output_path = Path(output)

    if output_path.exists():
        if not typer.confirm(f"{output} already exists. Overwrite?"):
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Abort()

    generate_default_config(output_path)
    console.print(f"[green]✓[/green] Generated configuration file: {output}")


@app.command()
def doctor(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
):
    """Check JDK candidates, build tools and local caches."""
    try:
        cfg = load_config(config)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Dependency Check")
    table.add_column("Component", style="cyan")
    table.add_column("Location")
    table.add_column("Status", justify="center")

    def add_check(component: str, location: Path | str | None, ok: bool) -> None:
        status = "[green]✓[/green]" if ok else "[red]✗[/red]"
        table.add_row(component, str(location) if location else "-", status)

    for toolchain in ToolchainSelector(cfg.toolchain).candidates:
        home = toolchain.path()
        ok = home is not None and (home / "bin" / "java").exists()
        add_check(f"JDK {toolchain}", home, ok)

    for component, executable in (
        ("Gradle", cfg.gradle.system_executable),
        ("Maven", cfg.maven.executable),
    ):
        found = shutil.which(executable)
        add_check(component, found or executable, found is not None)

    add_check("Gradle cache", cfg.repositories.gradle_cache, cfg.repositories.gradle_cache.is_dir())
    add_check(
        "Maven repository",
        cfg.repositories.maven_repository,
        cfg.repositories.maven_repository.is_dir(),
    )

    console.print(table)


if __name__ == "__main__":
    app()
