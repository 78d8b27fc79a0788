"""Data classes for project detection results."""

from dataclasses import dataclass, field
from typing import Literal

from ..registry import Capability


@dataclass(frozen=True)
class DetectedItem:
    """A detected framework with confidence and evidence."""

    name: str
    confidence: Literal["high", "medium"]
    source_file: str
    source_evidence: str


@dataclass(frozen=True)
class ScanStats:
    """Statistics from the detection pass."""

    indicators_checked: int
    lookup_failures: int
    duration_ms: int


@dataclass(frozen=True)
class DetectionResult:
    """Frameworks and features detected for one project run."""

    frameworks: tuple[DetectedItem, ...] = ()
    features: frozenset[str] = field(default_factory=frozenset)
    scan_stats: ScanStats | None = None

    @property
    def framework_ids(self) -> frozenset[str]:
        return frozenset(item.name for item in self.frameworks)

    def is_framework_detected(self, framework: str) -> bool:
        """Check if a framework was detected."""
        return any(item.name == framework for item in self.frameworks)

    def has_capability(self, capability: Capability) -> bool:
        """Check if a capability (e.g. TypeScript) holds for the project."""
        return self.is_framework_detected(capability.value)
