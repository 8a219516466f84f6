"""Run the external resolver (``dotnet restore``) inside the workspace."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled

from .errors import RestoreError
from .models import RestoreResult

logger = logging.getLogger(__name__)


def format_failure(result: RestoreResult) -> str:
    """Single diagnostic message with both output streams and the exit code."""
    return "\n".join([
        "Dotnet restore execution failed",
        "Standard Output:",
        result.stdout,
        "Standard Error:",
        result.stderr,
        "Exit Code:",
        str(result.exit_code),
    ])


def invoke(
    workspace: Path,
    resolver: str = Constants.RESOLVER_BINARY,
    confirm: Optional[Callable[[str], None]] = None,
) -> RestoreResult:
    """Run ``<resolver> restore`` with cwd=workspace and both streams captured.

    Blocks until the resolver exits; no timeout and no retry. Output is decoded
    as UTF-8 with undecodable bytes replaced.

    Raises:
        RestoreError: If the process cannot be started or exits non-zero.
    """
    if confirm:
        confirm("Running dotnet restore")
    cmd = [resolver, Constants.RESOLVER_COMMAND]
    with Timer() as t:
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(workspace),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise RestoreError(f"Failed to run dotnet restore: {e}") from e

    result = RestoreResult(
        exit_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
    if is_debug_enabled(logger):
        logger.debug("Resolver finished", extra=extra_context(
            event="subprocess_exit", component="restore", action=" ".join(cmd),
            outcome="success" if result.succeeded else "failure",
            exit_code=result.exit_code, duration_ms=t.duration_ms(),
        ))
    if not result.succeeded:
        raise RestoreError(format_failure(result), result)
    logger.info("dotnet restore completed in %d ms", t.duration_ms())
    return result
