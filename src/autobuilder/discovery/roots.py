"""
Build root discovery.

Walks a source tree once and reports every directory that is the top of a
Gradle or Maven build. Once a root is found its subtree is not searched any
further: nested builds belong to that root's own build system. One
multi-module project therefore resolves as a single root, while unrelated
sibling projects resolve as separate roots.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from autobuilder.config.models import BuildSystem

logger = logging.getLogger(__name__)

GRADLE_PROJECT_FILES = (
    "settings.gradle",
    "settings.gradle.kts",
    "build.gradle",
    "build.gradle.kts",
)

POM_FILE_NAME = "pom.xml"


@dataclass(frozen=True)
class BuildRoot:
    """A directory recognised as the top of one build."""

    kind: BuildSystem
    path: Path


def is_gradle_project_root(directory: Path) -> bool:
    return any((directory / name).exists() for name in GRADLE_PROJECT_FILES)


def is_maven_project_root(directory: Path) -> bool:
    return (directory / POM_FILE_NAME).exists()


def detect_build_system(directory: Path) -> BuildSystem | None:
    """Classify a single directory. Gradle markers win over a POM."""
    if is_gradle_project_root(directory):
        return BuildSystem.GRADLE
    if is_maven_project_root(directory):
        return BuildSystem.MAVEN
    return None


def discover_build_roots(root_dir: Path) -> list[BuildRoot]:
    """
    Find build roots under ``root_dir`` (inclusive), depth first.

    Returns:
        Build roots in walk order
    """
    roots: list[BuildRoot] = []

    for dirpath, dirnames, _ in os.walk(root_dir, followlinks=False):
        directory = Path(dirpath)
        kind = detect_build_system(directory)
        if kind is not None:
            logger.info(f"Detected {kind.value} project at {directory}")
            roots.append(BuildRoot(kind, directory))
            dirnames.clear()
            continue
        dirnames.sort()

    return roots
