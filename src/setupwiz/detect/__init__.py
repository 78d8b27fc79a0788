"""Project detection - framework and ESLint feature detection.

This module detects which frameworks a Node.js project uses from file
indicators and package.json dependencies, and derives the ESLint features
they imply. Detection results seed the feature selection defaults while
remaining fully overridable by users.

Usage:
    from setupwiz.detect import detect

    result = detect(Path("/path/to/project"))

    for item in result.frameworks:
        print(f"{item.name}: {item.confidence} ({item.source_evidence})")

    has_typescript = result.has_capability(Capability.TYPESCRIPT)
"""

import logging
import time
from pathlib import Path

from .features import aggregate_features
from .framework import detect_frameworks
from .manifest import (
    DependencySection,
    DetectionEvidenceError,
    FileExists,
    GetDependencies,
    ProjectEvidence,
)
from .result import DetectedItem, DetectionResult, ScanStats

logger = logging.getLogger(__name__)


def detect_with(
    file_exists: FileExists, get_dependencies: GetDependencies
) -> DetectionResult:
    """Run framework detection and feature aggregation over injected lookups.

    CONTRACT:
      Invariants:
        - Never raises for failing lookups - failures are logged and the
          affected indicators count as absent
        - Produces a fresh, immutable DetectionResult on every call

      Algorithm:
        1. Detect frameworks from file and package indicators
        2. Aggregate implied, evidence-detected, and required features
        3. Record scan statistics
    """
    start_time = time.perf_counter()
    stats: dict[str, int] = {}

    logger.debug("Running framework detection...")
    frameworks = detect_frameworks(file_exists, get_dependencies, scan_stats=stats)
    logger.debug(
        f"Framework detection complete: {len(frameworks)} frameworks "
        f"({stats.get('indicators_checked', 0)} indicators checked, "
        f"{stats.get('lookup_failures', 0)} lookup failures)"
    )
    for fw in frameworks:
        logger.debug(f"  - {fw.name}: {fw.confidence} (from {fw.source_evidence})")

    logger.debug("Running feature aggregation...")
    features = aggregate_features([fw.name for fw in frameworks], get_dependencies)
    logger.debug(f"Feature aggregation complete: {sorted(features)}")

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(f"Detection completed in {duration_ms}ms")

    return DetectionResult(
        frameworks=tuple(frameworks),
        features=features,
        scan_stats=ScanStats(
            indicators_checked=stats.get("indicators_checked", 0),
            lookup_failures=stats.get("lookup_failures", 0),
            duration_ms=duration_ms,
        ),
    )


def detect(project_path: Path, *, no_detect: bool = False) -> DetectionResult:
    """Detect frameworks and features for the project in project_path.

    Returns an empty DetectionResult when no_detect is set or when
    project_path is not a directory.
    """
    if no_detect:
        logger.debug("Detection skipped (no_detect=True)")
        return DetectionResult()

    if not project_path.exists() or not project_path.is_dir():
        logger.debug(f"Project path invalid: {project_path}")
        return DetectionResult()

    logger.debug(f"Starting detection in {project_path}")
    evidence = ProjectEvidence(project_path)
    return detect_with(evidence.file_exists, evidence.get_dependencies)


__all__ = [
    "DependencySection",
    "DetectedItem",
    "DetectionEvidenceError",
    "DetectionResult",
    "ProjectEvidence",
    "detect",
    "detect_with",
]
