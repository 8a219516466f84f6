"""Data models for the NuGet install pipeline."""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple, Union

import semantic_version

from constants import Constants

PACKAGE_NAME_RE = re.compile(r"^[a-z0-9_.-]{1,%d}$" % Constants.PACKAGE_NAME_MAX_LENGTH)


def is_valid_package_name(name: str) -> bool:
    """Case-insensitive check of a NuGet package identifier."""
    return isinstance(name, str) and bool(PACKAGE_NAME_RE.match(name.lower()))


def is_valid_version(version: str) -> bool:
    """Strict semantic version check (``13.0.3``, ``1.0.0-beta.2``)."""
    return isinstance(version, str) and semantic_version.validate(version)


@dataclass(frozen=True)
class PackageRequest:
    """A single package to install: identifier plus exact version."""

    identifier: str
    version: str

    @classmethod
    def parse(cls, identifier: str, version: str) -> "PackageRequest":
        """Validate user input and build a request.

        Raises:
            ValueError: If the identifier or version is malformed.
        """
        if not is_valid_package_name(identifier):
            raise ValueError(f"Invalid package name '{identifier}'")
        if not is_valid_version(version):
            raise ValueError(f"Invalid version '{version}' for package '{identifier}'")
        return cls(identifier=identifier, version=version)

    def __str__(self) -> str:
        return f"{self.identifier} {self.version}"


@dataclass(frozen=True)
class HostProject:
    """A Unity project root (has Packages/manifest.json)."""

    root: Path


@dataclass(frozen=True)
class PackageRoot:
    """A Unity package root (a folder directly under Packages/ with its own package.json)."""

    root: Path


InstallTarget = Union[HostProject, PackageRoot]


def destination_for(target: InstallTarget) -> Path:
    """Map an install target to the directory the artifacts are copied into."""
    if isinstance(target, HostProject):
        return target.root.joinpath(*Constants.PROJECT_INSTALL_SUBDIR)
    if isinstance(target, PackageRoot):
        return target.root.joinpath(*Constants.PACKAGE_INSTALL_SUBDIR)
    raise TypeError(f"Unsupported install target: {target!r}")


@dataclass(frozen=True)
class RestoreResult:
    """Captured outcome of one resolver run."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class LibraryEntry:
    """One resolved library: its folder under the packages path and its file list."""

    path: str
    files: Tuple[str, ...]


@dataclass(frozen=True)
class AssetManifest:
    """Validated subset of project.assets.json used for artifact selection.

    ``libraries`` preserves the manifest's iteration order.
    """

    libraries: Dict[str, LibraryEntry]
    packages_path: str


@dataclass(frozen=True)
class CopyStep:
    """A single artifact copy."""

    source: Path
    destination: Path
