"""
Unit tests for Maven dependency-graph reconciliation.
"""

import orjson
import pytest
from conftest import maven_repo_jar, write_file

from autobuilder.graph.coordinates import DependencyCoordinate, LocalRepositories
from autobuilder.graph.maven_report import (
    MavenDependencyReconciler,
    resolve_remote_id,
    resolve_snapshot_version,
)
from autobuilder.resolver.errors import DependencyResolutionFailed

SNAPSHOT_METADATA = """\
<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>org.example</groupId>
  <artifactId>snap</artifactId>
  <version>1.0-SNAPSHOT</version>
  <versioning>
    <snapshot>
      <timestamp>20240101.120000</timestamp>
      <buildNumber>3</buildNumber>
    </snapshot>
    <snapshotVersions>
      <snapshotVersion>
        <classifier>sources</classifier>
        <extension>jar</extension>
        <value>1.0-20231231.000000-2</value>
      </snapshotVersion>
      <snapshotVersion>
        <extension>jar</extension>
        <value>1.0-20240101.120000-3</value>
      </snapshotVersion>
      <snapshotVersion>
        <extension>pom</extension>
        <value>1.0-20240101.120000-3</value>
      </snapshotVersion>
    </snapshotVersions>
  </versioning>
</metadata>
"""


def artifact(group: str, name: str, version: str) -> dict:
    return {
        "id": f"{group}:{name}:jar",
        "groupId": group,
        "artifactId": name,
        "version": version,
        "scopes": ["compile"],
    }


def edge(source: dict, target: dict) -> dict:
    return {"from": source["id"], "to": target["id"], "resolution": "INCLUDED"}


@pytest.fixture
def repositories(repositories_config):
    return LocalRepositories(repositories_config)


@pytest.fixture
def reconciler(repositories):
    return MavenDependencyReconciler(repositories)


def write_snapshot_metadata(repository, remote="central", metadata=SNAPSHOT_METADATA):
    artifact_dir = repository / "org" / "example" / "snap" / "1.0-SNAPSHOT"
    write_file(artifact_dir / "_remote.repositories", (
        "#NOTE: This is a Maven Resolver internal implementation file\n"
        f"snap-1.0-20240101.120000-3.jar>{remote}=\n"
        f"snap-1.0-SNAPSHOT.pom>{remote}=\n"
    ))
    write_file(artifact_dir / f"maven-metadata-{remote}.xml", metadata)
    return artifact_dir


def test_module_output_is_excluded(reconciler, repositories_config):
    """Test that the module artifact itself is not reported as a dependency."""
    repository = repositories_config.maven_repository
    app = artifact("com.acme", "app", "1.0")
    lib = artifact("org.example", "lib", "2.1")
    util = artifact("org.example", "util", "0.5")
    lib_jar = maven_repo_jar(repository, "org.example", "lib", "2.1")
    util_jar = maven_repo_jar(repository, "org.example", "util", "0.5")
    maven_repo_jar(repository, "com.acme", "app", "1.0")

    reconciler.add_report({
        "artifacts": [app, lib, util],
        "dependencies": [edge(app, lib), edge(lib, util)],
    })

    assert reconciler.build_artifacts == {"com.acme:app:1.0"}
    assert sorted(reconciler.resolve_jars()) == sorted([lib_jar, util_jar])


def test_sibling_module_is_excluded_everywhere(reconciler, repositories_config):
    """Test that a module used by another module is not a dependency either."""
    repository = repositories_config.maven_repository
    core = artifact("com.acme", "core", "1.0")
    web = artifact("com.acme", "web", "1.0")
    lib = artifact("org.example", "lib", "2.1")
    lib_jar = maven_repo_jar(repository, "org.example", "lib", "2.1")
    maven_repo_jar(repository, "com.acme", "core", "1.0")

    reconciler.add_report({"artifacts": [core, lib], "dependencies": [edge(core, lib)]})
    reconciler.add_report({"artifacts": [web, core], "dependencies": [edge(web, core)]})

    assert reconciler.resolve_jars() == [lib_jar]


def test_gradle_cache_is_not_consulted(reconciler, repositories_config):
    app = artifact("com.acme", "app", "1.0")
    lib = artifact("org.example", "lib", "2.1")
    write_file(repositories_config.gradle_cache / "org.example" / "lib" / "2.1" / "h" / "lib-2.1.jar", "jar")

    reconciler.add_report({"artifacts": [app, lib], "dependencies": [edge(app, lib)]})

    assert reconciler.resolve_jars() == []


def test_remote_id_from_pom_entry(repositories_config):
    artifact_dir = write_snapshot_metadata(repositories_config.maven_repository, remote="nexus")
    assert resolve_remote_id(artifact_dir) == "nexus"


def test_remote_id_missing(temp_dir):
    assert resolve_remote_id(temp_dir) is None


def test_snapshot_version_from_metadata(repositories, repositories_config):
    write_snapshot_metadata(repositories_config.maven_repository)
    coordinate = DependencyCoordinate("org.example", "snap", "1.0-SNAPSHOT")

    assert resolve_snapshot_version(repositories, coordinate) == "1.0-20240101.120000-3"


def test_snapshot_version_from_timestamp(repositories, repositories_config):
    metadata = (
        "<metadata><versioning><snapshot>"
        "<timestamp>20240202.101010</timestamp><buildNumber>7</buildNumber>"
        "</snapshot></versioning></metadata>"
    )
    write_snapshot_metadata(repositories_config.maven_repository, metadata=metadata)
    coordinate = DependencyCoordinate("org.example", "snap", "1.0-SNAPSHOT")

    assert resolve_snapshot_version(repositories, coordinate) == "1.0-20240202.101010-7"


def test_snapshot_resolves_to_timestamped_jar(reconciler, repositories_config):
    repository = repositories_config.maven_repository
    write_snapshot_metadata(repository)
    jar = maven_repo_jar(repository, "org.example", "snap", "1.0-SNAPSHOT", "1.0-20240101.120000-3")
    app = artifact("com.acme", "app", "1.0")
    snap = artifact("org.example", "snap", "1.0-SNAPSHOT")

    reconciler.add_report({"artifacts": [app, snap], "dependencies": [edge(app, snap)]})

    assert reconciler.resolve_jars() == [jar]
    assert reconciler.unresolved_snapshots == []


def test_snapshot_falls_back_to_plain_jar(reconciler, repositories_config):
    jar = maven_repo_jar(repositories_config.maven_repository, "org.example", "snap", "1.0-SNAPSHOT")
    app = artifact("com.acme", "app", "1.0")
    snap = artifact("org.example", "snap", "1.0-SNAPSHOT")

    reconciler.add_report({"artifacts": [app, snap], "dependencies": [edge(app, snap)]})

    assert reconciler.resolve_jars() == [jar]


def test_unresolved_snapshot_is_recorded(reconciler):
    app = artifact("com.acme", "app", "1.0")
    snap = artifact("org.example", "snap", "1.0-SNAPSHOT")

    reconciler.add_report({"artifacts": [app, snap], "dependencies": [edge(app, snap)]})

    assert reconciler.resolve_jars() == []
    assert reconciler.unresolved_snapshots == ["org.example:snap:1.0-SNAPSHOT"]


def test_report_dir(reconciler, repositories_config, temp_dir):
    lib_jar = maven_repo_jar(repositories_config.maven_repository, "org.example", "lib", "2.1")
    app = artifact("com.acme", "app", "1.0")
    lib = artifact("org.example", "lib", "2.1")
    write_file(
        temp_dir / "dg-out" / "app-dependency-graph.json",
        orjson.dumps({"graphName": "app", "artifacts": [app, lib], "dependencies": [edge(app, lib)]}),
    )

    assert reconciler.add_report_dir(temp_dir / "dg-out") == 1
    assert reconciler.resolve_jars() == [lib_jar]


def test_missing_report_dir_fails(reconciler, temp_dir):
    with pytest.raises(DependencyResolutionFailed):
        reconciler.add_report_dir(temp_dir / "dg-out")


def test_graphs_without_artifacts_fail(reconciler, temp_dir):
    write_file(temp_dir / "dg-out" / "app-dependency-graph.json", orjson.dumps({"graphName": "app"}))

    with pytest.raises(DependencyResolutionFailed, match="have no artifacts"):
        reconciler.add_report_dir(temp_dir / "dg-out")
