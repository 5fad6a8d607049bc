"""
Build tool process runner.

Runs an external build command (gradle, mvn) on a chosen JDK, streaming its
output to the log while it runs. There is no timeout: a hung build blocks
until it is killed from outside.
"""

import logging
import subprocess
from pathlib import Path

from autobuilder.toolchain.selector import JavaToolchain

logger = logging.getLogger(__name__)


def run_command(work_dir: Path, args: list[str], toolchain: JavaToolchain) -> int:
    """
    Run a build command and wait for it to finish.

    Args:
        work_dir: Directory the command runs in
        args: Executable followed by its arguments
        toolchain: JDK the build runs on

    Returns:
        The process exit code (127 if the executable could not be started)
    """
    logger.info(f"Running in {work_dir} with {toolchain}: {' '.join(args)}")

    try:
        process = subprocess.Popen(
            args,
            cwd=work_dir,
            env=toolchain.environment(),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
        )
    except OSError as e:
        logger.error(f"Failed to start {args[0]}: {e}")
        return 127

    with process:
        assert process.stdout is not None
        for line in process.stdout:
            logger.debug(line.rstrip())
        exit_code = process.wait()

    logger.info(f"{Path(args[0]).name} exited with code {exit_code}")
    return exit_code
