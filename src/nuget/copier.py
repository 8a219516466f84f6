"""Select resolved artifacts from the manifest and copy them into the destination."""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from constants import Constants

from .errors import CopyError
from .models import AssetManifest, CopyStep

logger = logging.getLogger(__name__)


def is_artifact(name: str) -> bool:
    return name.lower().endswith(Constants.ARTIFACT_EXTENSIONS)


def is_excluded(library_key: str, prefixes: Iterable[str] = Constants.EXCLUDED_LIBRARY_PREFIXES) -> bool:
    """Excluded libraries are matched on their ``<name>/`` prefix, any version."""
    key = library_key.lower()
    return any(key.startswith(prefix.lower()) for prefix in prefixes)


def is_selected(file: str, target_framework: str = Constants.TARGET_FRAMEWORK) -> bool:
    """A file is kept when it is a dll/xml anywhere below ``lib/<target_framework>/``."""
    prefix = f"lib/{target_framework}/".lower()
    return file.lower().startswith(prefix) and is_artifact(file)


def plan_copies(manifest: AssetManifest, destination: Path) -> List[CopyStep]:
    """Copy steps in manifest order.

    Files with the same name from different libraries map to the same
    destination; the later library wins.
    """
    steps: List[CopyStep] = []
    packages_path = Path(manifest.packages_path)
    for key, library in manifest.libraries.items():
        if is_excluded(key):
            logger.debug("Skipping excluded library %s", key)
            continue
        for file in library.files:
            if not is_selected(file):
                continue
            source = packages_path / library.path / file
            steps.append(CopyStep(source=source, destination=Path(destination) / source.name))
    return steps


def prepare_destination(destination: Path, confirm: Optional[Callable[[str], None]] = None) -> None:
    """Create the destination, or remove artifacts left by a previous install.

    Only regular files directly inside ``destination`` with an artifact
    extension are removed; other files and subdirectories are kept.
    """
    destination = Path(destination)
    if not destination.exists():
        if confirm:
            confirm(f"Creating directory '{destination}'")
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CopyError(f"Failed to create directory '{destination}': {e}") from e
        return

    if not destination.is_dir():
        raise CopyError(f"Destination '{destination}' exists and is not a directory")
    try:
        with os.scandir(destination) as entries:
            stale = [Path(entry.path) for entry in entries if entry.is_file() and is_artifact(entry.name)]
    except OSError as e:
        raise CopyError(f"Failed to list '{destination}': {e}") from e
    for path in sorted(stale):
        if confirm:
            confirm(f"Deleting {path}")
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            raise CopyError(f"Failed to delete '{path}': {e}", destination=str(path)) from e


def apply(
    manifest: AssetManifest,
    destination: Path,
    confirm: Optional[Callable[[str], None]] = None,
) -> List[CopyStep]:
    """Prepare ``destination`` and copy every selected artifact into it.

    The first failed copy aborts; files copied before it stay in place.

    Raises:
        CopyError: On destination preparation or copy failure.
    """
    prepare_destination(destination, confirm)
    steps = plan_copies(manifest, destination)
    for step in steps:
        if confirm:
            confirm(f"Copying '{step.source}' to '{step.destination}'")
        try:
            shutil.copyfile(step.source, step.destination)
        except OSError as e:
            raise CopyError(
                f"Failed to copy '{step.source}' to '{step.destination}': {e}",
                source=str(step.source),
                destination=str(step.destination),
            ) from e
        logger.debug("Copied %s", step.destination.name)
    logger.info("Copied %d files into %s", len(steps), destination)
    return steps
