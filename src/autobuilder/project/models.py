"""
Resolved project models.

A ``Project`` describes one build root (or a wrapper over several roots):
where its sources live, which JDK built it, the compiled output of each
module and the dependency jars it was compiled against.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectModule(BaseModel):
    """One nested build unit whose compiled output was captured."""

    model_config = ConfigDict(frozen=True)

    source_root: Path = Field(description="Module directory inside the project sources")
    classes: list[Path] = Field(description="Compiled output directories of the module")

    def relative_to(self, base: Path) -> "ProjectModule":
        return ProjectModule(
            source_root=_relative(self.source_root, base),
            classes=[_relative(c, base) for c in self.classes],
        )


class Project(BaseModel):
    """A resolved project tree."""

    model_config = ConfigDict(frozen=True)

    source_root: Path
    java_toolchain: Path | None = None
    modules: list[ProjectModule] = Field(default_factory=list)
    dependencies: list[Path] = Field(
        default_factory=list, description="Dependency jars, direct dependencies first"
    )
    sub_projects: list["Project"] = Field(
        default_factory=list, description="Resolved roots of a multi-root wrapper"
    )
    errors: list[str] = Field(
        default_factory=list, description="Non-fatal failures recorded during resolution"
    )

    @field_validator("dependencies")
    @classmethod
    def _no_duplicate_dependencies(cls, value: list[Path]) -> list[Path]:
        seen: set[Path] = set()
        for dependency in value:
            if dependency in seen:
                raise ValueError(f"Duplicate dependency: {dependency}")
            seen.add(dependency)
        return value

    def relative_to(self, base: Path) -> "Project":
        """Return a copy of the tree with every path made relative to ``base``."""
        return Project(
            source_root=_relative(self.source_root, base),
            java_toolchain=_relative(self.java_toolchain, base) if self.java_toolchain else None,
            modules=[m.relative_to(base) for m in self.modules],
            dependencies=[_relative(d, base) for d in self.dependencies],
            sub_projects=[p.relative_to(base) for p in self.sub_projects],
            errors=list(self.errors),
        )

    def all_projects(self) -> list["Project"]:
        """This project followed by every nested sub-project, depth first."""
        result = [self]
        for sub_project in self.sub_projects:
            result.extend(sub_project.all_projects())
        return result


def _relative(path: Path, base: Path) -> Path:
    if not path.is_absolute():
        return path
    return path.relative_to(base)
