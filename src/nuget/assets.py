"""Parse and validate ``obj/project.assets.json`` produced by ``dotnet restore``.

Deserialization is permissive: unknown fields are ignored and property names
match case-insensitively. Validation then checks the structural invariants in
a fixed order so the first reported problem is always the same for a given
file. Nothing downstream sees a manifest that failed validation.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from constants import Constants

from .errors import ManifestError
from .models import AssetManifest, LibraryEntry

logger = logging.getLogger(__name__)


def _field(obj: Mapping[str, Any], name: str) -> Any:
    """Case-insensitive property lookup; exact match wins."""
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _expect(value: Any, kind: type, where: str) -> Any:
    if value is not None and not isinstance(value, kind):
        raise ManifestError(
            f"Failed to read {Constants.ASSETS_FILE}: '{where}' must be {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _deserialize(data: Any) -> Dict[str, Any]:
    """Shape-check the raw JSON into plain dicts with normalized keys."""
    if data is None:
        raise ManifestError(f"Failed to read {Constants.ASSETS_FILE}")
    _expect(data, dict, "$")

    libraries = _expect(_field(data, "libraries"), dict, "libraries")
    parsed_libraries: Optional[Dict[Any, Any]] = None
    if libraries is not None:
        parsed_libraries = {}
        for key, entry in libraries.items():
            _expect(entry, dict, f"libraries.{key}")
            if entry is None:
                parsed_libraries[key] = None
                continue
            files = _expect(_field(entry, "files"), list, f"libraries.{key}.files")
            if files is not None:
                for item in files:
                    _expect(item, str, f"libraries.{key}.files[]")
            parsed_libraries[key] = {
                "path": _expect(_field(entry, "path"), str, f"libraries.{key}.path"),
                "files": files,
            }

    project = _expect(_field(data, "project"), dict, "project")
    parsed_project: Optional[Dict[str, Any]] = None
    if project is not None:
        restore = _expect(_field(project, "restore"), dict, "project.restore")
        parsed_restore = None
        if restore is not None:
            parsed_restore = {
                "packagesPath": _expect(
                    _field(restore, "packagesPath"), str, "project.restore.packagesPath"
                ),
            }
        parsed_project = {"restore": parsed_restore}

    return {"libraries": parsed_libraries, "project": parsed_project}


def _library_issue(entry: Optional[Mapping[str, Any]]) -> Optional[str]:
    if entry is None:
        return "a library entry is null"
    if entry.get("path") is None:
        return "a library path is null"
    files: Optional[List[Any]] = entry.get("files")
    if files is None:
        return "a library files is null"
    if any(item is None for item in files):
        return "a library file is null"
    return None


def find_issue(assets: Mapping[str, Any]) -> Optional[str]:
    """Return the first structural violation, or None when the manifest is usable.

    Order: libraries, project, library keys, library entries (manifest order),
    restore block, packages path.
    """
    libraries = assets.get("libraries")
    if libraries is None:
        return "libraries not found"
    project = assets.get("project")
    if project is None:
        return "project not found"
    if any(key is None for key in libraries):
        return "a library key is null"
    for entry in libraries.values():
        issue = _library_issue(entry)
        if issue is not None:
            return issue
    restore = project.get("restore")
    if restore is None:
        return "restore not found"
    if restore.get("packagesPath") is None:
        return "packages path not found in restore"
    return None


def parse_assets(data: Any) -> AssetManifest:
    """Deserialize and validate already-decoded JSON.

    Raises:
        ManifestError: On shape mismatch or the first structural violation.
    """
    assets = _deserialize(data)
    issue = find_issue(assets)
    if issue is not None:
        raise ManifestError(f"Project assets file is invalid: {issue}")
    libraries = {
        key: LibraryEntry(path=entry["path"], files=tuple(entry["files"]))
        for key, entry in assets["libraries"].items()
    }
    return AssetManifest(
        libraries=libraries,
        packages_path=assets["project"]["restore"]["packagesPath"],
    )


def assets_path(workspace: Path) -> Path:
    return Path(workspace) / Constants.ASSETS_DIR / Constants.ASSETS_FILE


def load_and_validate(workspace: Path) -> AssetManifest:
    """Read ``<workspace>/obj/project.assets.json`` and return the validated manifest.

    Raises:
        ManifestError: If the file is unreadable, not UTF-8 JSON, or invalid.
    """
    path = assets_path(workspace)
    try:
        with open(path, "r", encoding="utf-8-sig") as fh:
            data = json.load(fh)
    except OSError as e:
        raise ManifestError(f"Failed to read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Failed to parse {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"Failed to decode {path}: {e}") from e
    manifest = parse_assets(data)
    logger.info("Loaded %d libraries from %s", len(manifest.libraries), Constants.ASSETS_FILE)
    return manifest
