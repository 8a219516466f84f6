"""Runtime configuration: YAML config file and environment overrides.

Only the resolver binary and the log level are tunable. Precedence is
CLI flag > environment variable > config file > built-in default. A missing or
malformed config file is reported and ignored; it never breaks the CLI.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)


@dataclass
class RuntimeConfig:
    """Effective tunables for one invocation."""

    resolver: str = Constants.RESOLVER_BINARY
    log_level: str = "INFO"


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML config file.

    Without an explicit path the default file names are looked up in the
    current directory.

    Returns:
        The parsed mapping, or an empty dict when nothing usable was found.
    """
    candidates = [path] if path else list(Constants.DEFAULT_CONFIG_FILES)
    for candidate in candidates:
        if not os.path.isfile(candidate):
            if path:
                logger.warning("Config file not found: %s", candidate)
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load config %s: %s", candidate, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a mapping at top level", candidate)
            return {}
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}


def _section_value(data: Dict[str, Any], section: str, key: str) -> Optional[str]:
    block = data.get(section)
    if isinstance(block, dict):
        value = block.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def resolve_config(args: Any = None, environ: Optional[Dict[str, str]] = None) -> RuntimeConfig:
    """Merge config file, environment and CLI arguments into a RuntimeConfig."""
    env = os.environ if environ is None else environ
    data = load_config_file(getattr(args, "CONFIG", None))
    cfg = RuntimeConfig()

    file_resolver = _section_value(data, "resolver", "binary")
    file_level = _section_value(data, "logging", "level")
    if file_resolver:
        cfg.resolver = file_resolver
    if file_level:
        cfg.log_level = file_level.upper()

    env_resolver = env.get(Constants.ENV_RESOLVER)
    env_level = env.get(Constants.ENV_LOG_LEVEL)
    if env_resolver and env_resolver.strip():
        cfg.resolver = env_resolver.strip()
    if env_level and env_level.strip():
        cfg.log_level = env_level.strip().upper()

    cli_resolver = getattr(args, "RESOLVER", None)
    cli_level = getattr(args, "LOG_LEVEL", None)
    if cli_resolver:
        cfg.resolver = cli_resolver
    if cli_level:
        cfg.log_level = str(cli_level).upper()

    return cfg
