"""
Project descriptor persistence.

The descriptor is a YAML document mirroring the ``Project`` tree. In simple
mode it holds absolute host paths, in portable mode paths relative to the
portable root.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from autobuilder.project.models import Project, ProjectModule


class DescriptorError(Exception):
    """Raised when a descriptor cannot be read back."""

    pass


def project_to_dict(project: Project) -> dict[str, Any]:
    """Convert a project tree into plain YAML-friendly data."""
    data: dict[str, Any] = {
        "source_root": str(project.source_root),
        "java_toolchain": str(project.java_toolchain) if project.java_toolchain else None,
        "modules": [_module_to_dict(m) for m in project.modules],
        "dependencies": [str(d) for d in project.dependencies],
        "sub_projects": [project_to_dict(p) for p in project.sub_projects],
    }
    if project.errors:
        data["errors"] = list(project.errors)
    return data


def _module_to_dict(module: ProjectModule) -> dict[str, Any]:
    return {
        "source_root": str(module.source_root),
        "classes": [str(c) for c in module.classes],
    }


def dump_project(project: Project, path: Path) -> Path:
    """Write the project descriptor to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(project_to_dict(project), f, default_flow_style=False, sort_keys=False)
    return path


def load_project(path: Path) -> Project:
    """Read a project descriptor written by :func:`dump_project`."""
    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DescriptorError(f"Invalid YAML in project descriptor {path}: {e}")

    if not isinstance(raw, dict):
        raise DescriptorError(f"Project descriptor {path} is empty or malformed")

    try:
        return Project.model_validate(raw)
    except ValidationError as e:
        raise DescriptorError(f"Project descriptor validation failed:\n{e}")
