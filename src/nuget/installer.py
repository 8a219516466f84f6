"""Install orchestration: locate target, restore in a temp workspace, copy artifacts."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled
from common.safe_mode import SafeModeAbort

from . import assets, copier, descriptor, locator, restore
from .errors import InstallError
from .models import CopyStep, PackageRequest, destination_for
from .workspace import TempWorkspace

logger = logging.getLogger(__name__)


class InstallState(Enum):
    """Pipeline states; DONE, FAILED and ABORTED are terminal."""

    IDLE = "idle"
    LOCATING_DESTINATION = "locating_destination"
    WORKSPACE_ACQUIRED = "workspace_acquired"
    DESCRIPTOR_WRITTEN = "descriptor_written"
    RESTORED = "restored"
    MANIFEST_VALIDATED = "manifest_validated"
    ARTIFACTS_COPIED = "artifacts_copied"
    DONE = "done"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass
class InstallOutcome:
    """Result of one install invocation."""

    state: InstallState = InstallState.IDLE
    destination: Optional[Path] = None
    failed_stage: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[InstallError] = None
    copied: List[CopyStep] = field(default_factory=list)
    history: List[InstallState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is InstallState.DONE

    def advance(self, state: InstallState) -> None:
        self.state = state
        self.history.append(state)


class NugetInstaller:
    """Runs the install pipeline once per call.

    Args:
        resolver: Resolver binary, ``dotnet`` by default.
        confirm: Safe-mode gate called before each side effect; may raise
            SafeModeAbort.
    """

    def __init__(
        self,
        resolver: str = Constants.RESOLVER_BINARY,
        confirm: Optional[Callable[[str], None]] = None,
    ):
        self.resolver = resolver
        self.confirm = confirm

    def install_in_unity_project(
        self,
        packages: Sequence[PackageRequest],
        start: Optional[Path] = None,
    ) -> InstallOutcome:
        """Install into the nearest Unity project or package above ``start`` (default: cwd)."""
        outcome = InstallOutcome()
        outcome.advance(InstallState.LOCATING_DESTINATION)
        try:
            target = locator.find_install_target(start)
        except InstallError as e:
            return self._fail(outcome, e)
        return self.install(packages, destination_for(target), outcome)

    def install(
        self,
        packages: Sequence[PackageRequest],
        destination: Path,
        outcome: Optional[InstallOutcome] = None,
    ) -> InstallOutcome:
        """Install ``packages`` into ``destination``.

        The workspace is removed before returning, whatever stage failed.
        """
        outcome = outcome or InstallOutcome()
        outcome.destination = Path(destination)
        names = ", ".join(str(p) for p in packages)
        try:
            with Timer() as t:
                with TempWorkspace(confirm=self.confirm) as workspace:
                    outcome.advance(InstallState.WORKSPACE_ACQUIRED)
                    descriptor.generate(workspace.path, packages, self.confirm)
                    outcome.advance(InstallState.DESCRIPTOR_WRITTEN)
                    restore.invoke(workspace.path, self.resolver, self.confirm)
                    outcome.advance(InstallState.RESTORED)
                    manifest = assets.load_and_validate(workspace.path)
                    outcome.advance(InstallState.MANIFEST_VALIDATED)
                    outcome.copied = copier.apply(manifest, outcome.destination, self.confirm)
                    outcome.advance(InstallState.ARTIFACTS_COPIED)
        except InstallError as e:
            return self._fail(outcome, e)
        except SafeModeAbort as e:
            logger.info("Exiting... (%s)", e.action)
            outcome.reason = str(e)
            outcome.advance(InstallState.ABORTED)
            return outcome

        outcome.advance(InstallState.DONE)
        if is_debug_enabled(logger):
            logger.debug("Install finished", extra=extra_context(
                event="function_exit", component="installer", action="install",
                outcome="success", count=len(outcome.copied), duration_ms=t.duration_ms(),
            ))
        logger.info("NuGet package installation complete: %s", names)
        return outcome

    @staticmethod
    def _fail(outcome: InstallOutcome, error: InstallError) -> InstallOutcome:
        logger.error("Install failed at stage '%s': %s", error.stage, error.reason)
        outcome.failed_stage = error.stage
        outcome.reason = error.reason
        outcome.error = error
        outcome.advance(InstallState.FAILED)
        return outcome

