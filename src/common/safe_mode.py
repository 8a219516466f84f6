"""Safe mode: ask for confirmation before every filesystem or process side effect."""
from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Optional, TextIO

logger = logging.getLogger(__name__)


class SafeModeAbort(Exception):
    """Raised when the user declines a safe-mode confirmation."""

    def __init__(self, action: str):
        super().__init__(f"Declined: {action}")
        self.action = action


class SafeMode:
    """Confirmation gate called with a description of the next mutating action.

    When disabled the gate is a no-op. When enabled it prints the current
    working directory and the action, then requires an explicit ``y``.
    """

    def __init__(
        self,
        enabled: bool = False,
        input_func: Optional[Callable[[str], str]] = None,
        out: Optional[TextIO] = None,
    ):
        self.enabled = enabled
        self._input = input_func or input
        self._out = out or sys.stdout

    def __call__(self, action: str) -> None:
        self.prompt(action)

    def prompt(self, action: str) -> None:
        """Confirm ``action`` or raise SafeModeAbort."""
        if not self.enabled:
            return
        self._out.write("*Safe Mode*\n")
        self._out.write(f"CWD: {os.getcwd()}\n")
        self._out.write(f"{action}\n")
        self._out.write("Do you want to continue? (y/n)\n")
        self._out.flush()
        try:
            response = self._input("")
        except EOFError:
            response = ""
        if (response or "").strip().lower() != "y":
            logger.info("Safe mode: user declined '%s'", action)
            raise SafeModeAbort(action)


def disabled() -> SafeMode:
    """A gate that never prompts."""
    return SafeMode(enabled=False)
