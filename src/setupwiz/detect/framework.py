"""Framework detection from file indicators and package.json dependencies."""

import logging
from collections.abc import Iterable, Mapping
from typing import Literal

from ..registry import Framework, load_frameworks
from .manifest import (
    PACKAGE_JSON,
    DependencySection,
    DetectionEvidenceError,
    FileExists,
    GetDependencies,
    read_section,
)
from .result import DetectedItem

logger = logging.getLogger(__name__)


def detect_frameworks(
    file_exists: FileExists,
    get_dependencies: GetDependencies,
    frameworks: Iterable[Framework] | None = None,
    *,
    scan_stats: dict[str, int] | None = None,
) -> list[DetectedItem]:
    """Detect which registry frameworks are present in a project.

    CONTRACT:
      Inputs:
        - file_exists: lookup answering whether a project-relative path exists
        - get_dependencies: lookup returning a package.json dependency section
        - frameworks: frameworks to evaluate, defaults to the full registry
        - scan_stats: optional dict updated with indicators_checked and
          lookup_failures counters

      Outputs:
        - list of DetectedItem, one per detected framework, in evaluation order

      Invariants:
        - A framework is detected iff any file indicator exists OR any package
          indicator is present in its section
        - Frameworks without indicators are never detected
        - A failing lookup counts as an absent indicator; the pass continues
        - Multiple frameworks may be detected together (no conflict resolution)

      Algorithm:
        1. Fetch production and development dependencies once
           (a failing section is treated as empty)
        2. For each framework:
           a. Check file indicators in order, stop at the first that exists
           b. Otherwise check dependencies, devDependencies, then either
           c. Record a DetectedItem with the matching evidence
        3. Return detected items
    """
    if frameworks is None:
        frameworks = load_frameworks().values()
    stats = scan_stats if scan_stats is not None else {}
    stats.setdefault("indicators_checked", 0)
    stats.setdefault("lookup_failures", 0)

    prod_deps = read_section(get_dependencies, DependencySection.PRODUCTION, stats)
    dev_deps = read_section(get_dependencies, DependencySection.DEVELOPMENT, stats)

    detected: list[DetectedItem] = []
    for framework in frameworks:
        if not framework.has_evidence:
            continue

        item = _check_file_indicators(framework, file_exists, stats)
        if item is None:
            item = _check_package_indicators(framework, prod_deps, dev_deps, stats)

        if item is not None:
            logger.debug(
                f"Detected {framework.id} via {item.source_evidence} "
                f"({item.confidence})"
            )
            detected.append(item)

    return detected


def _check_file_indicators(
    framework: Framework, file_exists: FileExists, stats: dict[str, int]
) -> DetectedItem | None:
    """Return evidence for the first file indicator that exists."""
    for path in framework.file_indicators:
        stats["indicators_checked"] += 1
        try:
            exists = file_exists(path)
        except (DetectionEvidenceError, OSError) as e:
            stats["lookup_failures"] += 1
            logger.warning(f"File check for {path} failed ({framework.id}): {e}")
            continue
        if exists:
            return DetectedItem(
                name=framework.id,
                confidence="high",
                source_file=path,
                source_evidence=path,
            )
    return None


def _check_package_indicators(
    framework: Framework,
    prod_deps: Mapping[str, str],
    dev_deps: Mapping[str, str],
    stats: dict[str, int],
) -> DetectedItem | None:
    """Return evidence for the first package indicator found in its section.

    Production dependencies are high confidence, dev dependencies medium.
    """
    indicators = framework.package_indicators

    for package in indicators.dependencies:
        stats["indicators_checked"] += 1
        if package in prod_deps:
            return _package_item(framework, package, "high")

    for package in indicators.dev_dependencies:
        stats["indicators_checked"] += 1
        if package in dev_deps:
            return _package_item(framework, package, "medium")

    for package in indicators.either:
        stats["indicators_checked"] += 1
        if package in prod_deps:
            return _package_item(framework, package, "high")
        if package in dev_deps:
            return _package_item(framework, package, "medium")

    return None


def _package_item(
    framework: Framework, package: str, confidence: Literal["high", "medium"]
) -> DetectedItem:
    return DetectedItem(
        name=framework.id,
        confidence=confidence,
        source_file=PACKAGE_JSON,
        source_evidence=package,
    )
