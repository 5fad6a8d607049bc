"""Shared fixtures for the auto builder tests."""

import tempfile
from pathlib import Path

import pytest

from autobuilder.config.models import (
    AutoBuilderConfig,
    LocalRepositoryConfig,
    ToolchainConfig,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def repositories_config(temp_dir):
    """Empty Gradle and Maven caches inside the temporary directory."""
    gradle_cache = temp_dir / "gradle-cache"
    maven_repository = temp_dir / "m2"
    gradle_cache.mkdir()
    maven_repository.mkdir()
    return LocalRepositoryConfig(gradle_cache=gradle_cache, maven_repository=maven_repository)


@pytest.fixture
def sample_config(temp_dir, repositories_config):
    """Configuration with one explicit JDK and temporary caches."""
    jdk = temp_dir / "jdk-17"
    (jdk / "bin").mkdir(parents=True)
    return AutoBuilderConfig(
        toolchain=ToolchainConfig(java_home=jdk),
        repositories=repositories_config,
    )


def write_file(path: Path, content: str | bytes = "") -> Path:
    """Create a file and its parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    return path


def gradle_cache_jar(cache: Path, group: str, artifact: str, version: str, digest: str = "abc123") -> Path:
    return write_file(cache / group / artifact / version / digest / f"{artifact}-{version}.jar", "jar")


def maven_repo_jar(repository: Path, group: str, artifact: str, version: str, file_version: str | None = None) -> Path:
    directory = repository.joinpath(*group.split("."), artifact, version)
    return write_file(directory / f"{artifact}-{file_version or version}.jar", "jar")
