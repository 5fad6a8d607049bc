"""
Portable project creation.

Materializes a resolved project as a self-contained directory::

    <portable>/
      sources/        copy of the whole source tree
      classes/c<N>/   one slot per module compiled-output directory
      dependencies/   dependency jars, d<N>/<name> for name collisions
      toolchain/      JDK homes, tc<N>/<name> for name collisions
      project.yaml    descriptor with paths relative to <portable>

Dependencies and toolchains are deduplicated by file name: a path seen
before is reused, a different path with a known name gets its own numbered
subfolder.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from autobuilder.project.files import CopyFailure, copy_path, copy_tree, log_copy_failure
from autobuilder.project.models import Project, ProjectModule
from autobuilder.project.persistence import dump_project

logger = logging.getLogger(__name__)

DESCRIPTOR_NAME = "project.yaml"


class PortabilityTargetInvalid(Exception):
    """The portable project path cannot be used."""

    pass


class PortKind(str, Enum):
    COPY = "copy"  # First sighting of this file name
    REUSE = "reuse"  # This exact source was ported before
    DISAMBIGUATE = "disambiguate"  # Same name, different source


@dataclass(frozen=True)
class PortAction:
    kind: PortKind
    destination: Path


def plan_port(
    source: Path,
    base: Path,
    name_owner: Path | None,
    ported_to: Path | None,
    duplicate_slot: str,
) -> PortAction:
    """
    Decide where ``source`` goes in a deduplicated directory.

    Args:
        source: Path being ported
        base: Directory the ported files live in
        name_owner: Source first ported under ``source.name``, if any
        ported_to: Where ``source`` itself was ported before, if it was
        duplicate_slot: Subfolder to use if the name is taken by another source
    """
    if ported_to is not None:
        return PortAction(PortKind.REUSE, ported_to)
    if name_owner is None:
        return PortAction(PortKind.COPY, base / source.name)
    return PortAction(PortKind.DISAMBIGUATE, base / duplicate_slot / source.name)


class PortCache:
    """Filename-keyed registry of ported files for one target directory."""

    def __init__(self, base: Path, duplicate_prefix: str):
        self.base = base
        self.duplicate_prefix = duplicate_prefix
        self.duplicates = 0
        self.owners: dict[str, Path] = {}
        self.ported: dict[Path, Path] = {}

    def plan(self, source: Path) -> PortAction:
        action = plan_port(
            source,
            self.base,
            self.owners.get(source.name),
            self.ported.get(source),
            f"{self.duplicate_prefix}{self.duplicates}",
        )
        if action.kind == PortKind.DISAMBIGUATE:
            self.duplicates += 1
        elif action.kind == PortKind.COPY:
            self.owners[source.name] = source
        self.ported[source] = action.destination
        return action


class PortableProjectCreator:
    """Creates a relocatable copy of a resolved project."""

    def __init__(self, portable_project_path: Path, root_project: Project):
        portable_project_path = portable_project_path.absolute()
        self.portable_project_path = portable_project_path
        self.root_project = root_project

        self.sources = portable_project_path / "sources"
        self.classes = portable_project_path / "classes"
        self.dependencies = portable_project_path / "dependencies"
        self.toolchain = portable_project_path / "toolchain"

        self._classes_counter = 0
        self._dependency_cache = PortCache(self.dependencies, "d")
        self._toolchain_cache = PortCache(self.toolchain, "tc")

    def create(self) -> Path:
        """
        Build the portable project and write its descriptor.

        Returns:
            Path to the written descriptor

        Raises:
            PortabilityTargetInvalid: If the target exists and is not an empty
                directory, or lies inside the project sources
        """
        self._check_target()

        for directory in (self.sources, self.classes, self.dependencies, self.toolchain):
            directory.mkdir(parents=True, exist_ok=True)

        logger.info(f"Copying sources of {self.root_project.source_root}")
        self._copy(copy_tree, self.root_project.source_root, self.sources)

        portable_project = self._port_project(self.root_project)
        relative_project = portable_project.relative_to(self.portable_project_path)

        descriptor = dump_project(relative_project, self.portable_project_path / DESCRIPTOR_NAME)
        logger.info(f"Portable project written to {self.portable_project_path}")
        return descriptor

    def _check_target(self) -> None:
        target = self.portable_project_path
        if target.exists() and (not target.is_dir() or any(target.iterdir())):
            logger.error(f"Portable project path exists: {target}")
            raise PortabilityTargetInvalid(f"Portable project path exists: {target}")

        if target.absolute().is_relative_to(self.root_project.source_root.absolute()):
            logger.error(f"Portable project path is inside the project sources: {target}")
            raise PortabilityTargetInvalid(
                f"Portable project path is inside the project sources: {target}"
            )

    def _port_project(self, project: Project) -> Project:
        return Project(
            source_root=self._port_sources(project.source_root),
            java_toolchain=(
                self._port_cached(self._toolchain_cache, project.java_toolchain)
                if project.java_toolchain
                else None
            ),
            modules=[self._port_module(m) for m in project.modules],
            dependencies=[self._port_cached(self._dependency_cache, d) for d in project.dependencies],
            sub_projects=[self._port_project(p) for p in project.sub_projects],
            errors=list(project.errors),
        )

    def _port_module(self, module: ProjectModule) -> ProjectModule:
        return ProjectModule(
            source_root=self._port_sources(module.source_root),
            classes=[self._port_classes(c) for c in module.classes],
        )

    def _port_sources(self, source: Path) -> Path:
        return self.sources / source.relative_to(self.root_project.source_root)

    def _port_classes(self, classes: Path) -> Path:
        destination = self.classes / f"c{self._classes_counter}"
        self._classes_counter += 1
        self._copy(copy_path, classes, destination)
        return destination

    def _port_cached(self, cache: PortCache, source: Path) -> Path:
        action = cache.plan(source)
        if action.kind != PortKind.REUSE:
            self._copy(copy_path, source, action.destination)
        return action.destination

    def _copy(self, copier: Callable[[Path, Path], Path], source: Path, destination: Path) -> None:
        try:
            copier(source, destination)
        except CopyFailure as e:
            log_copy_failure(e, f"Failed to create portable project for {source}")
