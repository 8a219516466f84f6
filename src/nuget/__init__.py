"""NuGet install pipeline for Unity projects and packages.

This package installs NuGet assemblies without a .NET project of its own:
- locator.py: finds the enclosing Unity project or package
- workspace.py: temporary directory scoped to one install
- descriptor.py: synthetic project file naming the requested packages
- restore.py: runs ``dotnet restore`` and captures its output
- assets.py: parses and validates obj/project.assets.json
- copier.py: selects netstandard2.0 dll/xml files and copies them
- installer.py: sequences the stages and reports the outcome
"""

from .errors import (  # noqa: F401
    AncestorSearchTimeout,
    CopyError,
    DescriptorError,
    InstallError,
    LocatorError,
    ManifestError,
    RestoreError,
    WorkspaceError,
)
from .models import (  # noqa: F401
    AssetManifest,
    HostProject,
    LibraryEntry,
    PackageRequest,
    PackageRoot,
    RestoreResult,
    destination_for,
)
from .installer import InstallOutcome, InstallState, NugetInstaller  # noqa: F401

__all__ = [
    # Models
    "AssetManifest",
    "HostProject",
    "LibraryEntry",
    "PackageRequest",
    "PackageRoot",
    "RestoreResult",
    "destination_for",
    # Orchestration
    "InstallOutcome",
    "InstallState",
    "NugetInstaller",
    # Errors
    "AncestorSearchTimeout",
    "CopyError",
    "DescriptorError",
    "InstallError",
    "LocatorError",
    "ManifestError",
    "RestoreError",
    "WorkspaceError",
]
