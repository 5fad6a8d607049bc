"""
Gradle project resolver.

Builds with ``clean classes``, snapshots ``build/classes/<language>/<source set>``
of every Gradle project in the tree, and obtains the dependency graph by
injecting the GitHub dependency-graph plugin through an init script.
"""

import logging
import os
import textwrap
from pathlib import Path

from autobuilder.config.models import BuildSystem
from autobuilder.discovery.roots import is_gradle_project_root
from autobuilder.graph.gradle_report import GradleDependencyReconciler
from autobuilder.project.files import CopyFailure, copy_tree, log_copy_failure
from autobuilder.resolver.base import ProjectResolver
from autobuilder.resolver.errors import DependencyResolutionFailed
from autobuilder.toolchain.selector import JavaToolchain

logger = logging.getLogger(__name__)

GRADLE_WRAPPER = "gradlew"
INIT_SCRIPT_NAME = "dep-graph.gradle"
REPORT_DIR_NAME = "dg-out"
RESOLVE_ALL_TASK = "ForceDependencyResolutionPlugin_resolveAllDependencies"

GRADLE_BUILD_FLAGS = [
    "--no-daemon",
    "-S",
    "-Dorg.gradle.dependency.verification=off",
    "-Dorg.gradle.warning.mode=none",
    "-Dorg.gradle.caching=false",
]


def resolve_gradle_executable(directory: Path, system_executable: str) -> str:
    """Prefer a wrapper backed by its jar and properties, else the system Gradle."""
    gradlew = directory / GRADLE_WRAPPER
    if not (gradlew.is_file() and os.access(gradlew, os.X_OK)):
        return system_executable

    wrapper_dir = directory / "gradle" / "wrapper"
    wrapper_jar = wrapper_dir / "gradle-wrapper.jar"
    wrapper_properties = wrapper_dir / "gradle-wrapper.properties"
    if not wrapper_jar.exists() or not wrapper_properties.exists():
        return system_executable

    return str(gradlew.absolute())


def render_init_script(plugin: str, repository: str) -> str:
    return textwrap.dedent(f"""\
        import org.gradle.github.GitHubDependencyGraphPlugin
        initscript {{
          repositories {{
            maven {{
              url = uri("{repository}")
            }}
          }}
          dependencies {{
            classpath("{plugin}")
          }}
        }}

        apply plugin: GitHubDependencyGraphPlugin
        """)


def dependency_graph_args(work_dir: Path, init_script: Path, report_dir: Path) -> list[str]:
    return [
        "-Dorg.gradle.configureondemand=false",
        "-Dorg.gradle.dependency.verification=off",
        "-Dorg.gradle.warning.mode=none",
        "--init-script",
        str(init_script.absolute()),
        RESOLVE_ALL_TASK,
        "--stacktrace",
        "-DGITHUB_DEPENDENCY_GRAPH_JOB_CORRELATOR=dep-graph",
        "-DGITHUB_DEPENDENCY_GRAPH_JOB_ID=unknown",
        "-DGITHUB_DEPENDENCY_GRAPH_SHA=unknown",
        "-DGITHUB_DEPENDENCY_GRAPH_REF=unknown",
        f"-DGITHUB_DEPENDENCY_GRAPH_WORKSPACE={work_dir.absolute()}",
        f"-DDEPENDENCY_GRAPH_REPORT_DIR={report_dir.absolute()}",
    ]


class GradleProjectResolver(ProjectResolver):
    """Resolves a Gradle build root."""

    build_system = BuildSystem.GRADLE

    @property
    def executable(self) -> str:
        return resolve_gradle_executable(
            self.project_source_root, self.config.gradle.system_executable
        )

    def build_command(self) -> list[str]:
        return [self.executable, *GRADLE_BUILD_FLAGS, "clean", self.config.gradle.build_target]

    def snapshot_modules(self) -> None:
        for dirpath, dirnames, _ in os.walk(self.project_source_root):
            dirnames.sort()
            directory = Path(dirpath)
            if not is_gradle_project_root(directory):
                continue

            classes_dir = directory / "build" / "classes"
            if not classes_dir.is_dir():
                continue

            configurations = [
                configuration
                for language in sorted(classes_dir.iterdir())
                if language.is_dir()
                for configuration in sorted(language.iterdir())
                if configuration.is_dir()
            ]
            if configurations:
                self._snapshot_module(directory, classes_dir, configurations)

    def _snapshot_module(self, module_root: Path, classes_dir: Path, configurations: list[Path]):
        snapshot_dir = self.resolver_dir / f"modules_{len(self.modules)}"
        snapshots = []
        for configuration in configurations:
            destination = snapshot_dir / configuration.relative_to(classes_dir)
            try:
                copy_tree(configuration, destination)
            except CopyFailure as e:
                log_copy_failure(e, f"Failed to create classes snapshot for {configuration}")
            snapshots.append(destination)

        module = self.register_module(module_root, snapshots)
        logger.debug(f"Registered Gradle module {module.source_root} ({len(snapshots)} configurations)")

    def write_init_script(self) -> Path:
        script = self.resolver_dir / INIT_SCRIPT_NAME
        script.write_text(
            render_init_script(
                self.config.gradle.dependency_graph_plugin,
                self.config.gradle.plugin_repository,
            )
        )
        return script

    def resolve_dependencies(self, toolchain: JavaToolchain) -> list[Path]:
        report_dir = self.resolver_dir / REPORT_DIR_NAME
        report_dir.mkdir(parents=True, exist_ok=True)

        args = [self.executable] + dependency_graph_args(
            self.project_source_root, self.write_init_script(), report_dir
        )
        status = self.run(args, toolchain)
        if status != 0:
            raise DependencyResolutionFailed(f"Gradle dependency graph task exited with {status}")

        reconciler = GradleDependencyReconciler(self.repositories)
        reconciler.add_report_dir(report_dir)
        return reconciler.resolve_jars()
