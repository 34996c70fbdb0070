"""Subprocess execution with rich error context.

Every git and editor invocation goes through run_subprocess_with_context() so
that a failure surfaces as a RuntimeError describing what was attempted, the
exact command line, the exit code and whatever the program printed.
"""

import logging
import subprocess
from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run cmd to completion, capturing its output as UTF-8 text.

    Undecodable bytes in the output (a latin-1 commit subject, say) are replaced.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of operation
        env: Complete environment for the child process (inherits when None)

    Returns:
        CompletedProcess instance from subprocess.run()

    Raises:
        RuntimeError: If the command exits non-zero or its binary cannot be found
    """
    logger.debug("Running: %s", " ".join(str(arg) for arg in cmd))
    try:
        return subprocess.run(
            cmd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )

    except subprocess.CalledProcessError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"

        if e.stdout:
            stdout_text = e.stdout if isinstance(e.stdout, str) else e.stdout.decode("utf-8")
            stdout_stripped = stdout_text.strip()
            if stdout_stripped:
                error_msg += f"\nstdout: {stdout_stripped}"

        if e.stderr:
            stderr_text = e.stderr if isinstance(e.stderr, str) else e.stderr.decode("utf-8")
            stderr_stripped = stderr_text.strip()
            if stderr_stripped:
                error_msg += f"\nstderr: {stderr_stripped}"

        raise RuntimeError(error_msg) from e

    except FileNotFoundError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise RuntimeError(error_msg) from e
