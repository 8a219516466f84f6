"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    INSTALL_ERROR = 1
    USAGE_ERROR = 2


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    VERSION = "0.1.0"

    # External resolver
    RESOLVER_BINARY = "dotnet"
    RESOLVER_COMMAND = "restore"

    # Build descriptor
    TARGET_FRAMEWORK = "netstandard2.0"
    PROJECT_SDK = "Microsoft.NET.Sdk"
    DESCRIPTOR_FILE = "proj.csproj"

    # Resolver output
    ASSETS_DIR = "obj"
    ASSETS_FILE = "project.assets.json"

    # Packages the Unity editor already ships; copying them causes duplicate assembly errors
    EXCLUDED_LIBRARY_PREFIXES = (
        "Newtonsoft.Json/",
        "Microsoft.CSharp/",
        "JetBrains.Annotations/",
    )
    ARTIFACT_EXTENSIONS = (".dll", ".xml")

    # Install target detection
    UNITY_PACKAGES_DIR = "Packages"
    UNITY_MANIFEST_FILE = "manifest.json"
    PACKAGE_MANIFEST_FILE = "package.json"
    PROJECT_INSTALL_SUBDIR = ("Assets", "NugetPackages")
    PACKAGE_INSTALL_SUBDIR = ("NugetPackages",)
    MAX_ANCESTOR_ITERATIONS = 1000

    PACKAGE_NAME_MAX_LENGTH = 214

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "UPAK_LOG_LEVEL"
    ENV_RESOLVER = "UPAK_DOTNET"
    DEFAULT_CONFIG_FILES = ("upak.yml", "upak.yaml")
