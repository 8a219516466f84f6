"""Upward directory search for the Unity project or package to install into."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar, Union

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

from .errors import AncestorSearchTimeout, LocatorError
from .models import HostProject, InstallTarget, PackageRoot

logger = logging.getLogger(__name__)

T = TypeVar("T")
PathLike = Union[str, "os.PathLike[str]"]


def _current_directory() -> Path:
    try:
        return Path(os.getcwd())
    except OSError as e:
        raise LocatorError(f"Failed to get current directory: {e}") from e


def first_ancestor(
    transform: Callable[[Path], Optional[T]],
    start: Optional[PathLike] = None,
    max_iterations: int = Constants.MAX_ANCESTOR_ITERATIONS,
) -> Optional[Tuple[T, Path]]:
    """Walk from ``start`` (default: cwd) towards the filesystem root.

    ``transform`` is called on each directory; the first non-None result is
    returned together with the directory it matched.

    Returns:
        ``(result, path)`` or None once the filesystem root was checked.

    Raises:
        LocatorError: If the current or a parent directory cannot be resolved.
        AncestorSearchTimeout: If ``max_iterations`` directories were checked
            without reaching the root.
    """
    current = Path(os.path.abspath(start)) if start is not None else _current_directory()
    for _ in range(max_iterations):
        result = transform(current)
        if result is not None:
            if is_debug_enabled(logger):
                logger.debug("Ancestor matched", extra=extra_context(
                    event="decision", component="locator", action="first_ancestor",
                    outcome="match", target=str(current),
                ))
            return result, current
        if current == Path(current.anchor):
            return None
        try:
            parent = current.parent
        except (OSError, ValueError) as e:
            raise LocatorError(f"Failed to get parent directory of '{current}': {e}") from e
        if parent == current:
            raise LocatorError(f"Could not get parent directory of '{current}'")
        current = parent
    raise AncestorSearchTimeout(
        f"Timeout while trying to find valid directory after {max_iterations} iterations"
    )


def locate(
    predicate: Callable[[Path], bool],
    start: Optional[PathLike] = None,
    max_iterations: int = Constants.MAX_ANCESTOR_ITERATIONS,
) -> Optional[Path]:
    """Return the nearest ancestor (including ``start``) satisfying ``predicate``."""
    found = first_ancestor(lambda p: True if predicate(p) else None, start, max_iterations)
    return found[1] if found else None


def is_unity_project(path: Path) -> bool:
    """A project root contains ``Packages/manifest.json``."""
    packages = path / Constants.UNITY_PACKAGES_DIR
    try:
        return packages.is_dir() and (packages / Constants.UNITY_MANIFEST_FILE).is_file()
    except OSError as e:
        logger.warning("Unexpected error while checking if Unity project: %s", e)
        return False


def is_unity_package(path: Path) -> bool:
    """A package root sits directly inside ``Packages/`` and has its own package.json."""
    try:
        in_packages = path.parent.name == Constants.UNITY_PACKAGES_DIR
        return in_packages and (path / Constants.PACKAGE_MANIFEST_FILE).is_file()
    except OSError as e:
        logger.warning("Unexpected error while checking if Unity package: %s", e)
        return False


def classify(path: Path) -> Optional[InstallTarget]:
    """Classify ``path`` as a host project, a package root, or neither."""
    if is_unity_project(path):
        return HostProject(path)
    if is_unity_package(path):
        return PackageRoot(path)
    return None


def find_install_target(
    start: Optional[PathLike] = None,
    max_iterations: int = Constants.MAX_ANCESTOR_ITERATIONS,
) -> InstallTarget:
    """Find the nearest Unity project or package enclosing ``start``.

    Raises:
        LocatorError: If nothing matches up to the filesystem root.
    """
    found = first_ancestor(classify, start, max_iterations)
    if found is None:
        raise LocatorError("Could not find a unity project or package to install to")
    target, _ = found
    logger.info("Found %s at %s", type(target).__name__, target.root)
    return target


def find_unity_project_root(start: Optional[PathLike] = None) -> Optional[Path]:
    """Nearest enclosing Unity project root."""
    return locate(is_unity_project, start)


def find_unity_package_root(start: Optional[PathLike] = None) -> Optional[Path]:
    """Nearest enclosing Unity package root."""
    return locate(is_unity_package, start)
