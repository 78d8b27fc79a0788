"""Feature aggregation from detected frameworks and manifest evidence."""

import logging
from collections.abc import Iterable

from ..registry import load_features, load_frameworks
from .manifest import GetDependencies, combined_dependencies

logger = logging.getLogger(__name__)


def aggregate_features(
    detected: Iterable[str], get_dependencies: GetDependencies
) -> frozenset[str]:
    """Derive the auto-detected feature set for a project.

    CONTRACT:
      Inputs:
        - detected: ids of detected frameworks
        - get_dependencies: lookup returning a package.json dependency section

      Outputs:
        - frozenset of feature ids

      Invariants:
        - Every required feature is always included
        - Idempotent and independent of the order of detected
        - Unknown framework ids are ignored
        - A failing dependency section contributes no evidence; the other
          section still counts

      Algorithm:
        1. Union the implied features of every detected framework
        2. Add features whose detect packages appear in prod or dev deps
        3. Add every required feature
    """
    frameworks = load_frameworks()
    features = load_features()

    result: set[str] = set()
    for framework_id in detected:
        framework = frameworks.get(framework_id)
        if framework is None:
            logger.debug(f"Ignoring unknown framework id: {framework_id}")
            continue
        result.update(framework.features)

    dependencies = combined_dependencies(get_dependencies)

    for feature in features.values():
        if any(package in dependencies for package in feature.detect):
            logger.debug(f"Feature {feature.id} detected from dependencies")
            result.add(feature.id)

    result.update(feature.id for feature in features.values() if feature.is_required)

    return frozenset(result)


def ordered_features(feature_ids: Iterable[str]) -> list[str]:
    """Return known feature ids in registry order, dropping unknown ids."""
    wanted = set(feature_ids)
    return [feature_id for feature_id in load_features() if feature_id in wanted]
