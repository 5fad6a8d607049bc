"""
Core configuration models for the auto builder.

Defines all configuration structures using Pydantic for validation.
"""

import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BuildSystem(str, Enum):
    """Supported JVM build systems."""

    GRADLE = "gradle"
    MAVEN = "maven"


class BuildMode(str, Enum):
    """What to produce from a resolved project."""

    SIMPLE = "simple"  # Descriptor with host-specific absolute paths
    PORTABLE = "portable"  # Self-contained relocatable copy


# ============================================================================
# Toolchain Configuration
# ============================================================================


# Environment variables in the order their JDKs are tried.
TOOLCHAIN_ENV_VARS = (
    ("java_home", "JAVA_HOME"),
    ("java_8_home", "JAVA_8_HOME"),
    ("java_latest_home", "JAVA_LATEST_HOME"),
    ("java_17_home", "JAVA_17_HOME"),
    ("java_11_home", "JAVA_11_HOME"),
)


class ToolchainConfig(BaseModel):
    """JDK installations to try when building a project."""

    model_config = ConfigDict(frozen=True)

    java_home: Path | None = Field(default=None, description="Explicit JDK override (JAVA_HOME)")
    java_8_home: Path | None = Field(default=None, description="JDK 8 home (JAVA_8_HOME)")
    java_latest_home: Path | None = Field(
        default=None, description="Latest JDK home (JAVA_LATEST_HOME)"
    )
    java_17_home: Path | None = Field(default=None, description="JDK 17 home (JAVA_17_HOME)")
    java_11_home: Path | None = Field(default=None, description="JDK 11 home (JAVA_11_HOME)")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ToolchainConfig":
        """Read the toolchain overrides from the environment once."""
        environ = os.environ if environ is None else environ
        values = {
            field: Path(environ[var])
            for field, var in TOOLCHAIN_ENV_VARS
            if environ.get(var)
        }
        return cls(**values)

    def candidate_homes(self) -> list[Path]:
        """Explicit JDK homes in the order they are tried, without repeats."""
        homes: list[Path] = []
        for field, _ in TOOLCHAIN_ENV_VARS:
            home = getattr(self, field)
            if home is not None and home not in homes:
                homes.append(home)
        return homes


# ============================================================================
# Local Package Caches
# ============================================================================


class LocalRepositoryConfig(BaseModel):
    """Read-only local artifact caches consulted when resolving jars."""

    model_config = ConfigDict(frozen=True)

    gradle_cache: Path = Field(
        default_factory=lambda: Path.home() / ".gradle" / "caches" / "modules-2" / "files-2.1",
        description="Gradle module cache (<group>/<artifact>/<version>/<hash>/<jar>)",
    )
    maven_repository: Path = Field(
        default_factory=lambda: Path.home() / ".m2" / "repository",
        description="Maven local repository (<group path>/<artifact>/<version>/<jar>)",
    )


# ============================================================================
# Build System Configuration
# ============================================================================


class GradleConfig(BaseModel):
    """Gradle invocation settings."""

    model_config = ConfigDict(frozen=True)

    system_executable: str = Field(
        default="gradle", description="Gradle binary used when the project has no usable wrapper"
    )
    build_target: str = Field(default="classes", description="Task that compiles the project")
    dependency_graph_plugin: str = Field(
        default="org.gradle:github-dependency-graph-gradle-plugin:+",
        description="Plugin coordinate injected through the init script",
    )
    plugin_repository: str = Field(
        default="https://plugins.gradle.org/m2/",
        description="Repository the init script fetches the plugin from",
    )


class MavenConfig(BaseModel):
    """Maven invocation settings."""

    model_config = ConfigDict(frozen=True)

    executable: str = Field(default="mvn", description="Maven binary")
    dependency_graph_plugin: str = Field(
        default="com.github.ferstl:depgraph-maven-plugin:4.0.2:graph",
        description="Goal exporting the dependency graph as JSON",
    )
    classpath_scopes: str = Field(default="compile", description="Scopes included in the graph")


# ============================================================================
# Main Configuration
# ============================================================================


class AutoBuilderConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(frozen=True)

    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    repositories: LocalRepositoryConfig = Field(default_factory=LocalRepositoryConfig)
    gradle: GradleConfig = Field(default_factory=GradleConfig)
    maven: MavenConfig = Field(default_factory=MavenConfig)
