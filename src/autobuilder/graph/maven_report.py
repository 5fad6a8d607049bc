"""
Maven dependency-graph report reconciliation.

The depgraph Maven plugin writes one JSON document per module::

    {"artifacts": [{"id": "...", "groupId": "...", "artifactId": "...",
                    "version": "..."}],
     "dependencies": [{"from": "<id>", "to": "<id>"}]}

Documents are unioned into a single directed graph. Within a document, an
artifact that is never the target of an edge is the module's own build
output and is excluded from the result. Everything else is looked up in the
local Maven repository only.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

import networkx as nx
import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from autobuilder.graph.coordinates import DependencyCoordinate, LocalRepositories
from autobuilder.resolver.errors import DependencyResolutionFailed

logger = logging.getLogger(__name__)

REMOTE_REPOSITORIES_FILE = "_remote.repositories"


class MavenArtifact(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    group_id: str = Field(alias="groupId")
    artifact_id: str = Field(alias="artifactId")
    version: str
    classifiers: list[str] | None = None
    types: list[str] | None = None

    def coordinate(self) -> DependencyCoordinate:
        return DependencyCoordinate(self.group_id, self.artifact_id, self.version)


class MavenDependencyEdge(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")


class MavenGraphReport(BaseModel):
    model_config = ConfigDict(extra="ignore")

    artifacts: list[MavenArtifact] | None = None
    dependencies: list[MavenDependencyEdge] | None = None


class MavenDependencyReconciler:
    """Merges depgraph reports into a jar list from the local Maven repository."""

    def __init__(self, repositories: LocalRepositories):
        self.repositories = repositories
        self.graph = nx.DiGraph()
        self.build_artifacts: set[str] = set()
        self.unresolved_snapshots: list[str] = []

    def add_report(self, document: dict[str, Any]) -> None:
        try:
            report = MavenGraphReport.model_validate(document)
        except ValidationError as e:
            raise DependencyResolutionFailed(f"Malformed dependency graph: {e}")

        module_graph = nx.DiGraph()
        for artifact in report.artifacts or []:
            module_graph.add_node(artifact.id, artifact=artifact)
        for edge in report.dependencies or []:
            module_graph.add_edge(edge.source, edge.target)

        for artifact in report.artifacts or []:
            if module_graph.in_degree(artifact.id) == 0:
                self.build_artifacts.add(artifact.coordinate().name())

        self.graph.update(module_graph)

    def add_report_file(self, path: Path) -> None:
        try:
            document = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise DependencyResolutionFailed(f"Unreadable dependency graph {path}: {e}")
        if not isinstance(document, dict):
            raise DependencyResolutionFailed(f"Unexpected dependency graph format: {path}")
        self.add_report(document)

    def add_report_dir(self, report_dir: Path) -> int:
        reports = sorted(report_dir.rglob("*.json")) if report_dir.is_dir() else []
        if not reports:
            raise DependencyResolutionFailed(f"No dependency graphs found in {report_dir}")
        for report in reports:
            logger.debug(f"Reading dependency graph {report}")
            self.add_report_file(report)
        if self.graph.number_of_nodes() == 0:
            raise DependencyResolutionFailed(f"Dependency graphs in {report_dir} have no artifacts")
        return len(reports)

    def external_artifacts(self) -> list[MavenArtifact]:
        """Artifacts that are not the output of one of the project's modules."""
        artifacts = []
        for _, data in self.graph.nodes(data=True):
            artifact = data.get("artifact")
            if artifact is None:
                continue
            if artifact.coordinate().name() in self.build_artifacts:
                continue
            artifacts.append(artifact)
        return artifacts

    def resolve_jars(self) -> list[Path]:
        jars: list[Path] = []
        external = self.external_artifacts()
        for artifact in external:
            jar = self._resolve_jar(artifact.coordinate())
            if jar is not None and jar not in jars:
                jars.append(jar)

        logger.info(f"Resolved {len(jars)} of {len(external)} Maven dependencies")
        return jars

    def _resolve_jar(self, coordinate: DependencyCoordinate) -> Path | None:
        if coordinate.is_snapshot():
            timestamped = resolve_snapshot_version(self.repositories, coordinate)
            if timestamped is not None:
                jar = self.repositories.find_maven_jar(coordinate, timestamped)
                if jar is not None:
                    return jar

        jar = self.repositories.find_maven_jar(coordinate)
        if jar is None:
            if coordinate.is_snapshot():
                logger.warning(f"Unresolved snapshot dependency: {coordinate.name()}")
                self.unresolved_snapshots.append(coordinate.name())
            else:
                logger.debug(f"No local jar for {coordinate.name()}")
        return jar


def resolve_remote_id(artifact_dir: Path) -> str | None:
    """
    Find the repository id a POM was downloaded from.

    ``_remote.repositories`` lines look like ``a-1.0-SNAPSHOT.pom>central=``.
    """
    remotes = artifact_dir / REMOTE_REPOSITORIES_FILE
    if not remotes.is_file():
        return None

    for line in remotes.read_text(errors="replace").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(">")
        if len(parts) < 2 or not parts[0].endswith(".pom"):
            continue
        remote_id = parts[1].strip().removesuffix("=")
        return remote_id or None
    return None


def resolve_snapshot_version(
    repositories: LocalRepositories, coordinate: DependencyCoordinate
) -> str | None:
    """
    Recover the timestamped version of a snapshot from local metadata.

    Returns:
        A version such as ``1.0-20240101.120000-3``, or None if unknown
    """
    artifact_dir = repositories.maven_artifact_dir(coordinate)
    remote_id = resolve_remote_id(artifact_dir)
    if remote_id is None:
        return None

    metadata_path = artifact_dir / f"maven-metadata-{remote_id}.xml"
    if not metadata_path.is_file():
        return None

    try:
        root = ET.parse(metadata_path).getroot()
    except ET.ParseError as e:
        logger.warning(f"Invalid snapshot metadata {metadata_path}: {e}")
        return None

    for snapshot_version in root.iterfind("./versioning/snapshotVersions/snapshotVersion"):
        if snapshot_version.findtext("classifier"):
            continue
        if snapshot_version.findtext("extension") == "jar":
            value = snapshot_version.findtext("value")
            if value:
                return value.strip()

    timestamp = root.findtext("./versioning/snapshot/timestamp")
    build_number = root.findtext("./versioning/snapshot/buildNumber")
    if timestamp and build_number:
        base = coordinate.version.removesuffix("SNAPSHOT")
        return f"{base}{timestamp.strip()}-{build_number.strip()}"

    return None
