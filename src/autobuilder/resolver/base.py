"""
Base build-system resolver.

A resolver owns one build root. It builds the root on the first JDK that
works, snapshots the compiled classes of every module, runs the build
system's dependency-graph plugin and turns the reports into dependency jars.

Build failures abort the root (no ``Project``). Dependency resolution
failures are recorded on the ``Project`` instead, which then carries
whatever dependencies could be resolved.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from autobuilder.bridges import build_runner
from autobuilder.config.models import AutoBuilderConfig, BuildSystem
from autobuilder.graph.coordinates import LocalRepositories
from autobuilder.project.models import Project, ProjectModule
from autobuilder.resolver.errors import DependencyResolutionFailed
from autobuilder.toolchain.selector import JavaToolchain, ToolchainSelector

logger = logging.getLogger(__name__)


class ProjectResolver(ABC):
    """Resolves one build root into a ``Project``."""

    build_system: BuildSystem

    def __init__(
        self,
        resolver_dir: Path,
        project_source_root: Path,
        config: AutoBuilderConfig,
        selector: ToolchainSelector | None = None,
    ):
        self.resolver_dir = resolver_dir
        self.project_source_root = project_source_root
        self.config = config
        self.selector = selector or ToolchainSelector(config.toolchain)
        self.repositories = LocalRepositories(config.repositories)

        self.java_toolchain: JavaToolchain | None = None
        self.modules: list[ProjectModule] = []
        self.dependencies: list[Path] = []
        self.errors: list[str] = []

    def resolve_project(self) -> Project:
        """
        Build the root and harvest its modules and dependencies.

        Raises:
            BuildFailed: If no JDK could build the project
        """
        name = self.build_system.value.capitalize()

        logger.info(f"{name} build start for: {self.project_source_root}")
        self.java_toolchain = self.build_project()
        self.snapshot_modules()
        logger.info(f"{name} build found {len(self.modules)} modules in {self.project_source_root}")

        logger.info(f"{name} dependency resolution start for: {self.project_source_root}")
        try:
            self.dependencies = self.collect_dependencies(self.java_toolchain)
        except DependencyResolutionFailed as e:
            logger.error(f"{name} dependency resolution failed for: {self.project_source_root}: {e}")
            self.errors.append(f"Dependency resolution failed: {e}")

        return Project(
            source_root=self.project_source_root,
            java_toolchain=self.java_toolchain.path(),
            modules=list(self.modules),
            dependencies=list(self.dependencies),
            errors=list(self.errors),
        )

    def build_project(self) -> JavaToolchain:
        """Run the build command on the first JDK that succeeds."""
        args = self.build_command()
        return self.selector.select(
            lambda toolchain: self.run(args, toolchain)
        )

    def collect_dependencies(self, toolchain: JavaToolchain) -> list[Path]:
        """Like :meth:`resolve_dependencies`, with filesystem errors reported as failures."""
        try:
            return self.resolve_dependencies(toolchain)
        except OSError as e:
            raise DependencyResolutionFailed(f"Filesystem error: {e}") from e

    def run(self, args: list[str], toolchain: JavaToolchain) -> int:
        return build_runner.run_command(self.project_source_root, args, toolchain)

    def register_module(self, module_root: Path, classes: list[Path]) -> ProjectModule:
        module = ProjectModule(source_root=module_root, classes=classes)
        self.modules.append(module)
        return module

    @abstractmethod
    def build_command(self) -> list[str]:
        """Command that cleans and compiles the project."""
        pass

    @abstractmethod
    def snapshot_modules(self) -> None:
        """Copy the compiled output of every module into ``resolver_dir``."""
        pass

    @abstractmethod
    def resolve_dependencies(self, toolchain: JavaToolchain) -> list[Path]:
        """
        Run the dependency-graph plugin and reconcile its reports.

        Raises:
            DependencyResolutionFailed: If the graph could not be produced or read
        """
        pass
