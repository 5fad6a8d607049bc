"""
Maven project resolver.

Builds with ``clean package`` (tests and static checks off), snapshots
``target/classes`` of every module, and exports the dependency graph with
the depgraph Maven plugin.
"""

import logging
import os
from pathlib import Path

from autobuilder.config.models import BuildSystem
from autobuilder.discovery.roots import POM_FILE_NAME, is_maven_project_root
from autobuilder.graph.maven_report import MavenDependencyReconciler
from autobuilder.project.files import CopyFailure, copy_tree, log_copy_failure
from autobuilder.resolver.base import ProjectResolver
from autobuilder.resolver.errors import DependencyResolutionFailed
from autobuilder.toolchain.selector import JavaToolchain

logger = logging.getLogger(__name__)

REPORT_DIR_NAME = "dg-out"

MAVEN_COMMAND_FLAGS = [
    "-f",
    POM_FILE_NAME,
    "-B",
    "-V",
    "-e",
    "-Dfindbugs.skip",
    "-Dcheckstyle.skip",
    "-Dpmd.skip=true",
    "-Dspotbugs.skip",
    "-Denforcer.skip",
    "-Dmaven.javadoc.skip",
    "-DskipTests",
    "-Dmaven.test.skip.exec",
    "-Dlicense.skip=true",
    "-Drat.skip=true",
    "-Dspotless.check.skip=true",
    "-Dspotless.apply.skip=true",
]


class MavenProjectResolver(ProjectResolver):
    """Resolves a Maven build root."""

    build_system = BuildSystem.MAVEN

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.unresolved_snapshots: list[str] = []

    def build_command(self) -> list[str]:
        return [self.config.maven.executable, "clean", "package", *MAVEN_COMMAND_FLAGS]

    def snapshot_modules(self) -> None:
        for dirpath, dirnames, _ in os.walk(self.project_source_root):
            dirnames.sort()
            directory = Path(dirpath)
            if not is_maven_project_root(directory):
                continue

            classes = directory / "target" / "classes"
            if classes.is_dir():
                self._snapshot_module(directory, classes)

    def _snapshot_module(self, module_root: Path, classes: Path) -> None:
        snapshot = self.resolver_dir / f"classes_{len(self.modules)}"
        try:
            copy_tree(classes, snapshot)
        except CopyFailure as e:
            log_copy_failure(e, f"Failed to create classes snapshot for {classes}")
        self.register_module(module_root, [snapshot])
        logger.debug(f"Registered Maven module {module_root}")

    def dependency_graph_command(self, report_dir: Path) -> list[str]:
        maven = self.config.maven
        return [
            maven.executable,
            *MAVEN_COMMAND_FLAGS,
            maven.dependency_graph_plugin,
            f"-DclasspathScopes={maven.classpath_scopes}",
            f"-DoutputDirectory={report_dir.absolute()}",
            "-DgraphFormat=json",
            "-DshowAllAttributesForJson=true",
            "-DuseArtifactIdInFileName=true",
        ]

    def resolve_dependencies(self, toolchain: JavaToolchain) -> list[Path]:
        report_dir = self.resolver_dir / REPORT_DIR_NAME

        status = self.run(self.dependency_graph_command(report_dir), toolchain)
        if status != 0:
            raise DependencyResolutionFailed(f"Maven depgraph goal exited with {status}")

        reconciler = MavenDependencyReconciler(self.repositories)
        reconciler.add_report_dir(report_dir)
        jars = reconciler.resolve_jars()

        self.unresolved_snapshots = list(reconciler.unresolved_snapshots)
        for name in self.unresolved_snapshots:
            self.errors.append(f"Unresolved snapshot dependency: {name}")
        return jars
