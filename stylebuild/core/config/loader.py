"""
Configuration loader — reads stylebuild.yml into the build model.

This is the primary entry point for loading build configuration.
It reads YAML, validates against Pydantic schemas, and returns
typed domain objects. Project metadata (version, homepage) may live
in the YAML or, as for npm-style projects, in package.json.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from stylebuild.core.models.build import BuildConfig

logger = logging.getLogger(__name__)

# Default config filename
BUILD_CONFIG_FILE = "stylebuild.yml"

# Metadata fallback when the YAML has no "package" section
PACKAGE_METADATA_FILE = "package.json"


class ConfigError(Exception):
    """Raised when build configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for stylebuild.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to stylebuild.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / BUILD_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_package_metadata(root: Path) -> dict:
    """Read ``version``/``homepage``/``name`` from package.json in *root*.

    Raises:
        ConfigError: If the file is missing, unreadable, or lacks a version.
    """
    path = root / PACKAGE_METADATA_FILE
    if not path.is_file():
        raise ConfigError(
            f"No {BUILD_CONFIG_FILE} or {PACKAGE_METADATA_FILE} found in {root}"
        )

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict) or not data.get("version"):
        raise ConfigError(f"{path} has no 'version' field")

    return {
        "name": str(data.get("name", "")),
        "version": str(data["version"]),
        "homepage": str(data.get("homepage", "")),
    }


def load_config(path: Path | None = None, root: Path | None = None) -> BuildConfig:
    """Load and validate build configuration.

    Args:
        path: Explicit path to stylebuild.yml. If None, searches upward
            from *root* (default: cwd).
        root: Project root used when no config file exists; its
            package.json provides the metadata and defaults apply.

    Returns:
        Validated BuildConfig model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file(root)

    if path is None:
        base = (root or Path.cwd()).resolve()
        logger.debug("No %s found, using defaults with %s", BUILD_CONFIG_FILE, base)
        return _validate({"package": load_package_metadata(base)}, base)

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    if "package" not in data:
        data["package"] = load_package_metadata(path.parent.resolve())

    return _validate(data, path)


def _validate(data: dict, origin: Path) -> BuildConfig:
    try:
        config = BuildConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid build configuration ({origin}): {e}") from e

    logger.info(
        "Loaded build config v%s with %d stylesheets",
        config.package.version, len(config.stylesheets),
    )
    return config
