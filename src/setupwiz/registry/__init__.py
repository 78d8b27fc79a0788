"""Capability registry: known frameworks, ESLint features, and feature groups.

The registry is static data shipped as YAML next to this module and loaded
once per process. Loaders return fresh containers built from cached,
immutable dataclasses.

Thread-safety: All loading functions use functools.lru_cache which is
thread-safe for initialization in CPython (GIL protects the cache dict).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when registry data is malformed or internally inconsistent."""

    pass


class Capability(str, Enum):
    """A precondition checked against detected frameworks.

    The capability holds when the framework whose id equals the value
    is detected.
    """

    TYPESCRIPT = "typescript"

    @property
    def display_name(self) -> str:
        return {"typescript": "TypeScript"}[self.value]


@dataclass(frozen=True)
class PackageIndicators:
    """package.json evidence for a framework, split by dependency section."""

    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    either: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.dependencies or self.dev_dependencies or self.either)


@dataclass(frozen=True)
class IgnorePath:
    """Directories and glob patterns a framework wants excluded from linting."""

    directories: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class Framework:
    """A detectable tool, library, or language context."""

    id: str
    display_name: str
    description: str = ""
    file_indicators: tuple[str, ...] = ()
    package_indicators: PackageIndicators = field(default_factory=PackageIndicators)
    features: tuple[str, ...] = ()
    supports_watch: bool = False
    lint_paths: tuple[str, ...] = ()
    ignore: IgnorePath = field(default_factory=IgnorePath)

    @property
    def has_evidence(self) -> bool:
        """False for generic entries that can never be detected."""
        return bool(self.file_indicators) or not self.package_indicators.is_empty()


@dataclass(frozen=True)
class Feature:
    """A togglable ESLint configuration capability."""

    id: str
    config_flag: str
    description: str
    packages: tuple[str, ...] = ()
    is_required: bool = False
    detect: tuple[str, ...] = ()
    requires_capability: Capability | None = None


@dataclass(frozen=True)
class FeatureGroup:
    """A named group of features shown together in the selection menu."""

    name: str
    features: tuple[str, ...]


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys instead of overwriting."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _parse_registry_yaml(stream: Any, filename: str) -> dict[str, Any]:
    try:
        return yaml.load(stream, Loader=_UniqueKeyLoader) or {}
    except yaml.constructor.ConstructorError as e:
        raise RegistryError(f"Invalid registry file {filename}: {e}") from e


def _load_yaml_file(filename: str) -> dict[str, Any]:
    """Load a YAML file from the registry data directory.

    Internal function - use the cached load_* functions instead.
    """
    filepath = Path(__file__).parent / filename

    with open(filepath, encoding="utf-8") as f:
        return _parse_registry_yaml(f, filename)


def _as_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(item) for item in value)


def _parse_capability(feature_id: str, value: Any) -> Capability | None:
    if value is None:
        return None
    try:
        return Capability(value)
    except ValueError:
        raise RegistryError(
            f"Feature '{feature_id}' requires unknown capability '{value}'"
        ) from None


@lru_cache(maxsize=1)
def _feature_table() -> tuple[Feature, ...]:
    data = _load_yaml_file("features.yml")
    features: list[Feature] = []
    for feature_id, entry in (data.get("features") or {}).items():
        # Placeholder entries ("") mean the rules ship with the base config
        packages = tuple(pkg for pkg in _as_tuple(entry.get("packages")) if pkg)
        features.append(
            Feature(
                id=feature_id,
                config_flag=entry["config_flag"],
                description=entry["description"],
                packages=packages,
                is_required=bool(entry.get("is_required", False)),
                detect=_as_tuple(entry.get("detect")),
                requires_capability=_parse_capability(
                    feature_id, entry.get("requires")
                ),
            )
        )
    return tuple(features)


@lru_cache(maxsize=1)
def _group_table() -> tuple[FeatureGroup, ...]:
    data = _load_yaml_file("features.yml")
    return tuple(
        FeatureGroup(name=group["name"], features=_as_tuple(group["features"]))
        for group in data.get("groups") or []
    )


@lru_cache(maxsize=1)
def _framework_table() -> tuple[Framework, ...]:
    data = _load_yaml_file("frameworks.yml")
    frameworks: list[Framework] = []
    for entry in data.get("frameworks") or []:
        indicators = entry.get("package_indicators") or {}
        ignore = entry.get("ignore") or {}
        frameworks.append(
            Framework(
                id=entry["id"],
                display_name=entry["display_name"],
                description=entry.get("description", ""),
                file_indicators=_as_tuple(entry.get("file_indicators")),
                package_indicators=PackageIndicators(
                    dependencies=_as_tuple(indicators.get("dependencies")),
                    dev_dependencies=_as_tuple(indicators.get("dev_dependencies")),
                    either=_as_tuple(indicators.get("either")),
                ),
                features=_as_tuple(entry.get("features")),
                supports_watch=bool(entry.get("supports_watch", False)),
                lint_paths=_as_tuple(entry.get("lint_paths")),
                ignore=IgnorePath(
                    directories=_as_tuple(ignore.get("directories")),
                    patterns=_as_tuple(ignore.get("patterns")),
                ),
            )
        )
    return tuple(frameworks)


def check_registry(
    frameworks: tuple[Framework, ...],
    features: tuple[Feature, ...],
    groups: tuple[FeatureGroup, ...],
) -> None:
    """Verify registry integrity.

    Raises:
        RegistryError: On duplicate ids, references to unknown features, or
            features missing from (or repeated across) the selection groups.
    """
    feature_ids = [feature.id for feature in features]
    duplicates = {fid for fid in feature_ids if feature_ids.count(fid) > 1}
    if duplicates:
        raise RegistryError(f"Duplicate feature ids: {', '.join(sorted(duplicates))}")

    framework_ids = [framework.id for framework in frameworks]
    duplicates = {fid for fid in framework_ids if framework_ids.count(fid) > 1}
    if duplicates:
        raise RegistryError(
            f"Duplicate framework ids: {', '.join(sorted(duplicates))}"
        )

    known = set(feature_ids)
    for framework in frameworks:
        unknown = [fid for fid in framework.features if fid not in known]
        if unknown:
            raise RegistryError(
                f"Framework '{framework.id}' implies unknown features: "
                f"{', '.join(unknown)}"
            )

    grouped = [fid for group in groups for fid in group.features]
    unknown = [fid for fid in grouped if fid not in known]
    if unknown:
        raise RegistryError(f"Feature groups reference unknown features: {unknown}")
    if sorted(grouped) != sorted(known):
        raise RegistryError(
            "Every feature must appear in exactly one group; "
            f"ungrouped: {sorted(known - set(grouped))}"
        )


@lru_cache(maxsize=1)
def _checked() -> bool:
    check_registry(_framework_table(), _feature_table(), _group_table())
    logger.debug(
        f"Registry loaded: {len(_framework_table())} frameworks, "
        f"{len(_feature_table())} features, {len(_group_table())} groups"
    )
    return True


def load_frameworks() -> dict[str, Framework]:
    """Return known frameworks keyed by id, in registry order."""
    _checked()
    return {framework.id: framework for framework in _framework_table()}


def load_features() -> dict[str, Feature]:
    """Return known features keyed by id, in registry order."""
    _checked()
    return {feature.id: feature for feature in _feature_table()}


def load_feature_groups() -> list[FeatureGroup]:
    """Return the feature groups used by the selection menu."""
    _checked()
    return list(_group_table())


def get_feature(feature_id: str) -> Feature:
    """Return a feature by id.

    Raises:
        KeyError: If the feature is not in the registry
    """
    return load_features()[feature_id]


def is_known_feature(feature_id: str) -> bool:
    """Check if a feature id exists in the registry."""
    return feature_id in load_features()


def required_features() -> list[str]:
    """Return ids of features included in every selection."""
    return [feature.id for feature in load_features().values() if feature.is_required]


__all__ = [
    "Capability",
    "Feature",
    "FeatureGroup",
    "Framework",
    "IgnorePath",
    "PackageIndicators",
    "RegistryError",
    "check_registry",
    "get_feature",
    "is_known_feature",
    "load_feature_groups",
    "load_features",
    "load_frameworks",
    "required_features",
]
