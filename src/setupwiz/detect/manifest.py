"""Evidence sources backed by a project directory and its package.json."""

import json
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from .utils import is_safe_path, project_file

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"


class DependencySection(str, Enum):
    """A dependency section of package.json."""

    PRODUCTION = "dependencies"
    DEVELOPMENT = "devDependencies"


# Injected lookups used by the detector and the feature aggregator
FileExists = Callable[[str], bool]
GetDependencies = Callable[[DependencySection], Mapping[str, str]]


class DetectionEvidenceError(Exception):
    """Raised when an evidence lookup (file check, manifest read) fails."""

    pass


def read_section(
    get_dependencies: GetDependencies,
    section: DependencySection,
    stats: dict[str, int] | None = None,
) -> Mapping[str, str]:
    """Fetch one dependency section, treating a failed lookup as empty."""
    try:
        return get_dependencies(section)
    except (DetectionEvidenceError, OSError) as e:
        if stats is not None:
            stats["lookup_failures"] = stats.get("lookup_failures", 0) + 1
        logger.warning(f"Could not read {section.value}, treating as empty: {e}")
        return {}


def combined_dependencies(get_dependencies: GetDependencies) -> dict[str, str]:
    """Merge production and development dependencies into one map.

    Each section fails open on its own, so a malformed devDependencies
    never hides production entries.
    """
    merged: dict[str, str] = {}
    merged.update(read_section(get_dependencies, DependencySection.PRODUCTION))
    merged.update(read_section(get_dependencies, DependencySection.DEVELOPMENT))
    return merged


class ProjectEvidence:
    """File-existence and dependency lookups for one project directory.

    package.json is read at most once per instance. A missing manifest
    yields empty dependency maps; an unreadable or malformed one raises
    DetectionEvidenceError from every dependency lookup.
    """

    def __init__(self, project_path: Path) -> None:
        self.project_path = project_path
        self._manifest: dict[str, Any] | None = None

    def file_exists(self, relative_path: str) -> bool:
        candidate = project_file(self.project_path, relative_path)
        if candidate is None:
            return False
        try:
            if not candidate.exists():
                return False
        except OSError as e:
            raise DetectionEvidenceError(
                f"Failed to check {relative_path}: {e}"
            ) from e
        return is_safe_path(candidate, self.project_path)

    def get_dependencies(self, section: DependencySection) -> dict[str, str]:
        deps = self.manifest().get(section.value) or {}
        if not isinstance(deps, dict):
            raise DetectionEvidenceError(
                f"{PACKAGE_JSON} field '{section.value}' is not an object"
            )
        return {str(name): str(version) for name, version in deps.items()}

    def manifest(self) -> dict[str, Any]:
        """Return the parsed package.json ({} when the project has none)."""
        if self._manifest is None:
            self._manifest = self._load_manifest()
        return self._manifest

    def _load_manifest(self) -> dict[str, Any]:
        path = self.project_path / PACKAGE_JSON
        if not path.exists():
            logger.debug(f"No {PACKAGE_JSON} in {self.project_path}")
            return {}
        if not is_safe_path(path, self.project_path):
            raise DetectionEvidenceError(f"Refusing to read unsafe {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise DetectionEvidenceError(f"Failed to parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise DetectionEvidenceError(f"{path} does not contain a JSON object")
        return data
