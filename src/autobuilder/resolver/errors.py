"""Errors raised while resolving a build root."""


class ResolutionError(Exception):
    """Base class for per-root resolution failures."""

    pass


class BuildFailed(ResolutionError):
    """The build process exited with a non-zero status."""

    pass


class ToolchainExhausted(BuildFailed):
    """No candidate JDK could build the project."""

    pass


class DependencyResolutionFailed(ResolutionError):
    """The dependency-graph invocation failed or produced no usable report."""

    pass
