"""
Gradle dependency-graph report reconciliation.

The GitHub dependency-graph Gradle plugin writes one or more JSON reports,
each holding named manifests that map a package id to its resolved entry::

    {"manifests": {"<name>": {"resolved": {
        "<id>": {"package_url": "pkg:maven/g/a@1.0",
                 "relationship": "direct",
                 "dependencies": ["<id>", ...]}}}}}

Reports are merged, the Maven coordinates are mapped onto jars in the local
caches, and the jars are ordered direct dependencies first.
"""

import logging
from pathlib import Path
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from autobuilder.graph.coordinates import (
    DependencyCoordinate,
    LocalRepositories,
    parse_package_url,
)
from autobuilder.resolver.errors import DependencyResolutionFailed

logger = logging.getLogger(__name__)

DIRECT_RELATIONSHIP = "direct"


class ResolvedDependency(BaseModel):
    model_config = ConfigDict(extra="ignore")

    package_url: str
    relationship: str
    dependencies: list[str] | None = None


class DependencyManifest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resolved: dict[str, ResolvedDependency] | None = None


class DependencyReport(BaseModel):
    model_config = ConfigDict(extra="ignore")

    manifests: dict[str, DependencyManifest] | None = Field(default=None)


class GradleDependencyReconciler:
    """Merges Gradle dependency-graph reports into an ordered jar list."""

    def __init__(self, repositories: LocalRepositories):
        self.repositories = repositories
        self.coordinates: dict[str, DependencyCoordinate] = {}
        self.direct_ids: set[str] = set()
        self.entry_count = 0

    def add_report(self, document: dict[str, Any]) -> None:
        """Merge one parsed report."""
        try:
            report = DependencyReport.model_validate(document)
        except ValidationError as e:
            raise DependencyResolutionFailed(f"Malformed dependency report: {e}")

        for manifest in (report.manifests or {}).values():
            for dependency_id, dependency in (manifest.resolved or {}).items():
                self.entry_count += 1
                coordinate = parse_package_url(dependency.package_url)
                if coordinate is None:
                    continue
                self.coordinates[dependency_id] = coordinate
                if dependency.relationship == DIRECT_RELATIONSHIP:
                    self.direct_ids.add(dependency_id)

    def add_report_file(self, path: Path) -> None:
        try:
            document = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise DependencyResolutionFailed(f"Unreadable dependency report {path}: {e}")
        if not isinstance(document, dict):
            raise DependencyResolutionFailed(f"Unexpected dependency report format: {path}")
        self.add_report(document)

    def add_report_dir(self, report_dir: Path) -> int:
        """
        Merge every ``*.json`` report under ``report_dir``.

        Returns:
            Number of reports merged

        Raises:
            DependencyResolutionFailed: If there is no report, one is unreadable
                or none of them has an entry
        """
        reports = sorted(report_dir.rglob("*.json")) if report_dir.is_dir() else []
        if not reports:
            raise DependencyResolutionFailed(f"No dependency reports found in {report_dir}")
        for report in reports:
            logger.debug(f"Reading dependency report {report}")
            self.add_report_file(report)
        if self.entry_count == 0:
            raise DependencyResolutionFailed(f"Dependency reports in {report_dir} have no entries")
        return len(reports)

    def resolve_jars(self) -> list[Path]:
        """Jars of the direct dependencies sorted by id, then transitive ones."""
        ordered_ids = sorted(self.coordinates)
        direct = [i for i in ordered_ids if i in self.direct_ids]
        transitive = [i for i in ordered_ids if i not in self.direct_ids]

        jars: list[Path] = []
        for dependency_id in direct + transitive:
            coordinate = self.coordinates[dependency_id]
            jar = self.repositories.find_jar(coordinate)
            if jar is None:
                logger.debug(f"No local jar for {coordinate.name()}")
                continue
            if jar not in jars:
                jars.append(jar)

        logger.info(
            f"Resolved {len(jars)} of {len(self.coordinates)} Gradle dependencies "
            f"({len(direct)} direct)"
        )
        return jars
