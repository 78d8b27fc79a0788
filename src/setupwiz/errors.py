"""Exceptions raised by setupwiz, collected for callers."""

from .config import ConfigVersionError
from .detect.manifest import DetectionEvidenceError
from .package_json import PackageJsonError
from .registry import RegistryError
from .selection import EmptySelectionError, UnknownFeatureIdError
from .validate import FeatureValidationError

__all__ = [
    "ConfigVersionError",
    "DetectionEvidenceError",
    "EmptySelectionError",
    "FeatureValidationError",
    "PackageJsonError",
    "RegistryError",
    "UnknownFeatureIdError",
]
