"""Saved feature selections in .setupwiz.yaml files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Current config schema version
CURRENT_VERSION = "1"


class ConfigVersionError(Exception):
    """Raised when config version is incompatible."""

    pass


def _migrate_config(data: dict) -> dict:
    """Migrate older config formats to current version.

    Currently a no-op for v1, but establishes the pattern for future upgrades.
    """
    return data


def _validate_version(version: Any) -> str:
    """Validate config version and return normalized version string.

    Args:
        version: Version value from config, or None if missing

    Returns:
        Validated version string

    Raises:
        ConfigVersionError: If version is newer than supported or not a number
    """
    if version is None:
        logger.warning("Config file missing version field, assuming version '1'")
        return CURRENT_VERSION

    try:
        version_num = int(version)
    except (TypeError, ValueError):
        raise ConfigVersionError(
            f"Unrecognized config version '{version}'. "
            f"Supported versions: {CURRENT_VERSION}"
        ) from None

    if version_num > int(CURRENT_VERSION):
        raise ConfigVersionError(
            f"Config file requires setupwiz version {version} or newer. "
            f"Current setupwiz supports config version {CURRENT_VERSION}. "
            "Please upgrade setupwiz to use this config."
        )

    return str(version)


def _string_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        logger.warning(f"Ignoring malformed '{key}' in config: expected a list of names")
        return []
    return list(value)


@dataclass
class Config:
    """Represents a .setupwiz.yaml configuration."""

    version: str = CURRENT_VERSION

    # ESLint module settings
    eslint_features: list[str] = field(default_factory=list)

    @property
    def has_eslint_selection(self) -> bool:
        return bool(self.eslint_features)

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load config from a .setupwiz.yaml file.

        Raises:
            ConfigVersionError: If config version is incompatible
            OSError: If the file cannot be read
            yaml.YAMLError: If the file is not valid YAML
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigVersionError(
                f"Config file {path} must contain a mapping, got {type(data).__name__}"
            )

        version = _validate_version(data.get("version"))
        data = _migrate_config(data)

        eslint = data.get("eslint") or {}
        if not isinstance(eslint, dict):
            logger.warning("Ignoring malformed 'eslint' section in config")
            eslint = {}

        return cls(
            version=version,
            eslint_features=_string_list(eslint.get("features"), "eslint.features"),
        )

    def save(self, path: Path) -> None:
        """Save config to a .setupwiz.yaml file."""
        data = {
            "version": self.version,
            "eslint": {
                "features": list(self.eslint_features),
            },
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_saved_selection(path: Path) -> list[str] | None:
    """Return the saved ESLint features, or None when there is nothing usable.

    A missing file, an unreadable file and a file without an eslint section
    all count as "no saved selection". Version errors propagate.
    """
    if not path.is_file():
        return None

    try:
        config = Config.load(path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read saved selection from {path}: {e}")
        return None

    if not config.has_eslint_selection:
        return None
    return config.eslint_features
