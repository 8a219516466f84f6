"""Synthetic SDK-style project file handed to ``dotnet restore``."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Optional, Sequence

from constants import Constants

from .errors import DescriptorError
from .models import PackageRequest

logger = logging.getLogger(__name__)


def build_descriptor(
    packages: Sequence[PackageRequest],
    target_framework: str = Constants.TARGET_FRAMEWORK,
) -> ET.Element:
    """Build the project element tree.

    Produces::

        <Project Sdk="Microsoft.NET.Sdk">
          <PropertyGroup><TargetFramework>netstandard2.0</TargetFramework></PropertyGroup>
          <ItemGroup><PackageReference Include="..." Version="..." /></ItemGroup>
        </Project>
    """
    root = ET.Element("Project", {"Sdk": Constants.PROJECT_SDK})
    property_group = ET.SubElement(root, "PropertyGroup")
    ET.SubElement(property_group, "TargetFramework").text = target_framework
    item_group = ET.SubElement(root, "ItemGroup")
    for package in packages:
        ET.SubElement(item_group, "PackageReference", {
            "Include": package.identifier,
            "Version": package.version,
        })
    return root


def serialize_descriptor(root: ET.Element) -> str:
    return ET.tostring(root, encoding="unicode")


def generate(
    workspace: Path,
    packages: Sequence[PackageRequest],
    confirm: Optional[Callable[[str], None]] = None,
) -> Path:
    """Write the descriptor into ``workspace`` and return its path.

    Raises:
        DescriptorError: If serialization or the write fails.
    """
    target = Path(workspace) / Constants.DESCRIPTOR_FILE
    try:
        xml = serialize_descriptor(build_descriptor(packages))
    except (TypeError, ValueError) as e:
        raise DescriptorError(f"Failed to serialize project file: {e}") from e
    if confirm:
        confirm(f"Writing generated xml to project file '{target}'")
    try:
        target.write_text(xml, encoding="utf-8")
    except OSError as e:
        raise DescriptorError(f"Failed to write project file '{target}': {e}") from e
    logger.debug("Wrote project file %s", target)
    return target
