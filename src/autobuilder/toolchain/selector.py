"""
JDK toolchain selection.

A project is built with the first JDK whose build succeeds. The same JDK is
then reused for every later invocation against that project, since mixing
JDKs between the build and dependency resolution can give inconsistent
class files and dependency results.
"""

import logging
import os
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from autobuilder.config.models import ToolchainConfig
from autobuilder.resolver.errors import ToolchainExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JavaToolchain:
    """A JDK installation; ``java_home=None`` means the JDK already on PATH."""

    java_home: Path | None = None

    @property
    def is_default(self) -> bool:
        return self.java_home is None

    def path(self) -> Path | None:
        """Home directory of this JDK, if it can be located."""
        if self.java_home is not None:
            return self.java_home
        return find_default_java_home()

    def environment(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Environment for a build process running on this JDK."""
        env = dict(os.environ if base is None else base)
        if self.java_home is not None:
            env["JAVA_HOME"] = str(self.java_home)
            env["PATH"] = os.pathsep.join(
                p for p in (str(self.java_home / "bin"), env.get("PATH", "")) if p
            )
        return env

    def __str__(self) -> str:
        return str(self.java_home) if self.java_home else "<default JDK>"


def find_default_java_home() -> Path | None:
    """Locate the JDK the ``java`` executable on PATH belongs to."""
    java = shutil.which("java")
    if java is None:
        return None
    # <home>/bin/java, possibly behind alternatives symlinks
    return Path(java).resolve().parent.parent


class ToolchainSelector:
    """Tries candidate JDKs in a fixed order until a probe succeeds."""

    def __init__(self, config: ToolchainConfig):
        self.config = config
        self.candidates = [JavaToolchain(home) for home in config.candidate_homes()]
        self.candidates.append(JavaToolchain())

    def try_select(self, probe: Callable[[JavaToolchain], int]) -> JavaToolchain | None:
        """
        Run ``probe`` against each candidate until one returns exit code 0.

        Returns:
            The first successful toolchain, or None if every candidate failed
        """
        for toolchain in self.candidates:
            logger.info(f"Trying JDK: {toolchain}")
            status = probe(toolchain)
            if status == 0:
                return toolchain
            logger.warning(f"JDK {toolchain} failed with exit code {status}")
        return None

    def select(self, probe: Callable[[JavaToolchain], int]) -> JavaToolchain:
        """Like :meth:`try_select`, but raises when no candidate succeeds."""
        toolchain = self.try_select(probe)
        if toolchain is None:
            raise ToolchainExhausted(
                f"No JDK succeeded out of {len(self.candidates)} candidates"
            )
        return toolchain
