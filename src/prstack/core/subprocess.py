"""Subprocess execution for the git and gh gateways.

Every external command goes through run_subprocess_with_context so failures
surface as RuntimeError messages that name the operation, the command line,
the exit code and whatever the tool printed.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _decode(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace").strip()
    return stream.strip()


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    check: bool = True,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Run a command, capturing text output, and enrich failures.

    Args:
        cmd: Command and arguments to execute
        operation_context: What the command is for, phrased to follow "Failed to"
        cwd: Working directory for the command
        check: Raise on non-zero exit (default: True)
        **kwargs: Passed through to subprocess.run()

    Returns:
        CompletedProcess with stdout and stderr as text

    Raises:
        RuntimeError: If the command exits non-zero (with check=True) or the
            binary is missing
    """
    logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=check,
            **kwargs,
        )
    except subprocess.CalledProcessError as e:
        lines = [
            f"Failed to {operation_context}",
            f"Command: {' '.join(cmd)}",
            f"Exit code: {e.returncode}",
        ]
        stdout = _decode(e.stdout)
        if stdout:
            lines.append(f"stdout: {stdout}")
        stderr = _decode(e.stderr)
        if stderr:
            lines.append(f"stderr: {stderr}")
        raise RuntimeError("\n".join(lines)) from e
    except FileNotFoundError as e:
        raise RuntimeError(
            f"Command not found while trying to {operation_context}: {cmd[0]}\n"
            f"Full command: {' '.join(cmd)}"
        ) from e


def execute_gh_command(cmd: list[str], operation_context: str) -> str:
    """Run a gh CLI command and return its stdout."""
    result = run_subprocess_with_context(cmd, operation_context=operation_context)
    return result.stdout
