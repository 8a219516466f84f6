"""Scoped temporary directory holding one install's descriptor and resolver output."""
from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .errors import WorkspaceError

logger = logging.getLogger(__name__)


class TempWorkspace:
    """Temporary directory removed recursively when the ``with`` block exits.

    Release happens on every exit path, including exceptions and
    KeyboardInterrupt, and is idempotent. A directory that is already gone
    counts as released; any other deletion failure is logged, not raised.
    """

    def __init__(self, prefix: str = "upak-", confirm: Optional[Callable[[str], None]] = None):
        self._prefix = prefix
        self._confirm = confirm
        self._path: Optional[Path] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise WorkspaceError("Accessing workspace path while not acquired")
        return self._path

    @property
    def acquired(self) -> bool:
        return self._path is not None

    def acquire(self) -> Path:
        if self.acquired:
            return self._path
        if self._confirm:
            self._confirm("Creating temporary directory")
        try:
            self._path = Path(tempfile.mkdtemp(prefix=self._prefix))
        except OSError as e:
            raise WorkspaceError(f"Failed to create temporary directory: {e}") from e
        logger.info("Installing to %s", self._path)
        return self._path

    def release(self) -> None:
        if not self.acquired:
            return
        path, self._path = self._path, None
        if self._confirm:
            self._confirm(f"Deleting temporary directory '{path}'")
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            logger.debug("Temporary directory already removed: %s", path)
        except OSError as e:
            logger.warning("Failed to delete temporary directory '%s': %s", path, e)

    def __enter__(self) -> "TempWorkspace":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
