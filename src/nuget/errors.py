"""Failure taxonomy for the NuGet install pipeline.

Every stage raises a subclass of InstallError; the orchestrator catches the base
class, so adding a stage never requires touching the failure handling.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import RestoreResult


class InstallError(Exception):
    """Base class for a terminal failure of one pipeline stage."""

    stage = "install"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.stage}: {self.reason}"


class LocatorError(InstallError):
    """No install target found, or the directory walk itself failed."""

    stage = "locate"


class AncestorSearchTimeout(LocatorError, TimeoutError):
    """The upward directory walk hit its iteration ceiling."""


class WorkspaceError(InstallError):
    """The temporary workspace could not be created."""

    stage = "workspace"


class DescriptorError(InstallError):
    """The build descriptor could not be serialized or written."""

    stage = "descriptor"


class RestoreError(InstallError):
    """The resolver could not be started or exited non-zero."""

    stage = "restore"

    def __init__(self, reason: str, result: Optional["RestoreResult"] = None):
        super().__init__(reason)
        self.result = result


class ManifestError(InstallError):
    """The asset manifest is unreadable, undeserializable or structurally invalid."""

    stage = "manifest"


class CopyError(InstallError):
    """Destination preparation or an artifact copy failed."""

    stage = "copy"

    def __init__(self, reason: str, source: Optional[str] = None, destination: Optional[str] = None):
        super().__init__(reason)
        self.source = source
        self.destination = destination
