"""Expand a feature selection into the packages to install."""

import logging
from collections.abc import Iterable, Mapping

from .registry import Feature, load_features

logger = logging.getLogger(__name__)


def resolve_dependencies(
    selection: Iterable[str],
    core_packages: Iterable[str],
    features: Mapping[str, Feature] | None = None,
) -> list[str]:
    """Return core packages followed by each selected feature's packages.

    Duplicates keep their first position. Features without packages, and
    ids missing from the feature table, contribute nothing.
    """
    if features is None:
        features = load_features()
    packages: dict[str, None] = dict.fromkeys(core_packages)

    for feature_id in selection:
        feature = features.get(feature_id)
        if feature is None:
            logger.debug(f"No package data for unknown feature: {feature_id}")
            continue
        packages.update(dict.fromkeys(feature.packages))

    return list(packages)
