"""
Maven coordinates and local artifact caches.

Two cache layouts are understood:

- Gradle: ``<cache>/<group>/<artifact>/<version>/<hash>/<artifact>-<version>.jar``
- Maven:  ``<repository>/<group as path>/<artifact>/<version>/<artifact>-<version>.jar``
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from autobuilder.config.models import LocalRepositoryConfig

logger = logging.getLogger(__name__)

MAVEN_PACKAGE_PREFIX = "pkg:maven/"


@dataclass(frozen=True)
class DependencyCoordinate:
    group_id: str
    artifact_id: str
    version: str

    def name(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def jar_name(self, version: str | None = None) -> str:
        return f"{self.artifact_id}-{version or self.version}.jar"

    def gradle_cache_subpath(self) -> Path:
        return Path(self.group_id, self.artifact_id, self.version)

    def maven_cache_subpath(self) -> Path:
        return Path(*self.group_id.split("."), self.artifact_id, self.version)

    def is_snapshot(self) -> bool:
        return self.version.endswith("-SNAPSHOT")


def parse_package_url(package_url: str) -> DependencyCoordinate | None:
    """
    Decode ``pkg:maven/<group>/<artifact>@<version>[?qualifiers]``.

    Returns:
        The coordinate, or None for non-Maven or malformed package URLs
    """
    if not package_url.startswith(MAVEN_PACKAGE_PREFIX):
        return None

    body = package_url[len(MAVEN_PACKAGE_PREFIX):]
    body, _, _ = body.partition("?")
    group_id, sep, rest = body.partition("/")
    if not sep:
        return None
    artifact_id, sep, version = rest.partition("@")
    if not sep or not group_id or not artifact_id or not version:
        return None

    return DependencyCoordinate(group_id, artifact_id, version)


class LocalRepositories:
    """Read-only lookups of jars in the local Gradle and Maven caches."""

    def __init__(self, config: LocalRepositoryConfig):
        self.gradle_cache = config.gradle_cache
        self.maven_repository = config.maven_repository

    def maven_artifact_dir(self, coordinate: DependencyCoordinate) -> Path:
        return self.maven_repository / coordinate.maven_cache_subpath()

    def find_gradle_jar(self, coordinate: DependencyCoordinate) -> Path | None:
        artifact_dir = self.gradle_cache / coordinate.gradle_cache_subpath()
        if not artifact_dir.is_dir():
            return None

        jar_name = coordinate.jar_name()
        for candidate in sorted(artifact_dir.rglob(jar_name)):
            if candidate.is_file():
                return candidate
        return None

    def find_maven_jar(
        self, coordinate: DependencyCoordinate, version: str | None = None
    ) -> Path | None:
        jar = self.maven_artifact_dir(coordinate) / coordinate.jar_name(version)
        return jar if jar.is_file() else None

    def find_jar(self, coordinate: DependencyCoordinate) -> Path | None:
        """Gradle cache first, then the Maven repository."""
        return self.find_gradle_jar(coordinate) or self.find_maven_jar(coordinate)
