"""
Filesystem helpers shared by module snapshots and portable projects.

Symlinks inside copied trees stay links; a single file is copied by
content. Copies never overwrite an existing destination file. Per-entry
failures inside a tree do not stop the rest of the copy; they are collected
and reported through ``CopyFailure``.
"""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class CopyFailure(Exception):
    """Raised when part of a copy could not be completed."""

    def __init__(self, source: Path, failures: list[tuple[str, str, str]]):
        self.source = source
        self.failures = failures
        super().__init__(f"Failed to copy {len(failures)} entries from {source}")


def _copy_no_overwrite(src: str, dst: str, follow_symlinks: bool = False) -> str:
    if os.path.lexists(dst):
        raise FileExistsError(f"Destination already exists: {dst}")
    return shutil.copy2(src, dst, follow_symlinks=follow_symlinks)


def copy_tree(source: Path, destination: Path) -> Path:
    """
    Recursively copy ``source`` into ``destination``.

    ``destination`` may already exist (it is usually freshly created).

    Raises:
        CopyFailure: If any entry could not be copied. Everything else is
            still copied.
    """
    destination.mkdir(parents=True, exist_ok=True)
    try:
        shutil.copytree(
            source,
            destination,
            symlinks=True,
            copy_function=_copy_no_overwrite,
            dirs_exist_ok=True,
        )
    except shutil.Error as e:
        raise CopyFailure(source, list(e.args[0])) from e
    except OSError as e:
        raise CopyFailure(source, [(str(source), str(destination), str(e))]) from e
    return destination


def copy_path(source: Path, destination: Path) -> Path:
    """
    Copy a file or a directory tree to ``destination``.

    A file is copied by content even when ``source`` is a symlink, so the copy
    does not point back into the host cache.
    """
    if source.is_dir():
        return copy_tree(source, destination)

    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        _copy_no_overwrite(str(source), str(destination), follow_symlinks=True)
    except OSError as e:
        raise CopyFailure(source, [(str(source), str(destination), str(e))]) from e
    return destination


def log_copy_failure(failure: CopyFailure, context: str) -> None:
    """Log every entry of a copy failure."""
    logger.error(f"{context}: {failure}")
    for src, dst, reason in failure.failures:
        logger.error(f"  {src} -> {dst}: {reason}")
