"""
Project resolution orchestrator.

Coordinates the whole resolution run:
1. Discovering build roots under the project directory
2. Creating one resolver per root with its own working directory
3. Resolving the roots one after another
4. Aggregating the results into a single ``Project``
"""

import logging
import tempfile
from pathlib import Path

from autobuilder.config.models import AutoBuilderConfig, BuildSystem
from autobuilder.discovery.roots import BuildRoot, discover_build_roots
from autobuilder.project.models import Project
from autobuilder.resolver.base import ProjectResolver
from autobuilder.resolver.gradle import GradleProjectResolver
from autobuilder.resolver.maven import MavenProjectResolver
from autobuilder.toolchain.selector import ToolchainSelector

logger = logging.getLogger(__name__)

RESOLVERS: dict[BuildSystem, type[ProjectResolver]] = {
    BuildSystem.GRADLE: GradleProjectResolver,
    BuildSystem.MAVEN: MavenProjectResolver,
}


def create_resolver(
    root: BuildRoot,
    work_dir: Path,
    config: AutoBuilderConfig,
    selector: ToolchainSelector,
) -> ProjectResolver:
    """Create the resolver for one build root in a fresh working directory."""
    resolver_dir = Path(tempfile.mkdtemp(prefix=f"{root.kind.value}_project_", dir=work_dir))
    resolver_cls = RESOLVERS[root.kind]
    return resolver_cls(resolver_dir, root.path, config, selector)


def resolve_project(
    root_dir: Path, work_dir: Path, config: AutoBuilderConfig
) -> Project | None:
    """
    Resolve every build root under ``root_dir``.

    Args:
        root_dir: Project root directory
        work_dir: Directory for per-root working directories
        config: Builder configuration

    Returns:
        The single resolved project, a wrapper over several resolved roots,
        or None if no root could be resolved
    """
    work_dir.mkdir(parents=True, exist_ok=True)
    selector = ToolchainSelector(config.toolchain)

    roots = discover_build_roots(root_dir)
    resolvers = [create_resolver(root, work_dir, config, selector) for root in roots]

    resolved: list[Project] = []
    for resolver in resolvers:
        logger.info(f"Start project resolution for: {resolver.project_source_root}")
        try:
            project = resolver.resolve_project()
        except Exception as e:
            logger.error(f"Project resolution failed for: {resolver.project_source_root}: {e}")
            logger.debug("Resolution failure details", exc_info=True)
            continue
        if project is None:
            logger.error(f"Project resolution produced nothing for: {resolver.project_source_root}")
            continue
        resolved.append(project)

    if not resolved:
        logger.error(f"No projects resolved at {root_dir}")
        return None

    if len(resolved) == 1:
        return resolved[0]

    # Wrapper reuses the first toolchain; modules and jars stay on the sub-projects
    return Project(
        source_root=root_dir,
        java_toolchain=resolved[0].java_toolchain,
        modules=[],
        dependencies=[],
        sub_projects=resolved,
    )
