"""Feature selection: reconcile saved, detected, and user-chosen features."""

import logging
from collections.abc import Callable, Collection, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Literal

from .detect.features import ordered_features
from .registry import load_feature_groups, load_features

logger = logging.getLogger(__name__)

Provenance = Literal["detected", "restoredFromSaved", "userChosen"]

# Grouped menu options: group name -> [(label, feature id), ...]
GroupedOptions = dict[str, list[tuple[str, str]]]

Confirm = Callable[[str, bool], bool]
SelectMany = Callable[[str, GroupedOptions, bool, list[str]], Iterable[str]]

SELECT_FEATURES_MESSAGE = "Select the features you want to enable:"


class UnknownFeatureIdError(Exception):
    """Raised when a saved selection references features not in the registry."""

    def __init__(self, unknown_ids: list[str]) -> None:
        self.unknown_ids = unknown_ids
        super().__init__(
            f"Saved selection references unknown features: {', '.join(unknown_ids)}"
        )


class EmptySelectionError(Exception):
    """Raised when an empty feature selection is not acceptable to the caller."""

    def __init__(self) -> None:
        super().__init__("No features selected.")


@dataclass(frozen=True)
class FeatureSelection:
    """The resolved feature set for one run, with provenance per member."""

    features: tuple[str, ...] = ()
    provenance: Mapping[str, Provenance] = field(default_factory=dict)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self.features

    def __iter__(self) -> Iterator[str]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)

    @property
    def is_empty(self) -> bool:
        return not self.features

    def as_set(self) -> frozenset[str]:
        return frozenset(self.features)


def detected_features_message(features: Iterable[str]) -> str:
    return (
        f"Detected features: {', '.join(features)}. "
        "Would you like to include these features?"
    )


def check_saved_selection(saved: Collection[str]) -> list[str]:
    """Return the saved selection if every id is known.

    Raises:
        UnknownFeatureIdError: If any id is missing from the registry
    """
    known = load_features()
    unknown = [feature_id for feature_id in saved if feature_id not in known]
    if unknown:
        raise UnknownFeatureIdError(unknown)
    return list(saved)


def grouped_feature_options() -> GroupedOptions:
    """Build grouped menu options covering the entire feature registry."""
    features = load_features()
    return {
        group.name: [
            (f"{feature_id} - {features[feature_id].description}", feature_id)
            for feature_id in group.features
        ]
        for group in load_feature_groups()
    }


def resolve_selection(
    saved: Collection[str] | None,
    auto_detected: Collection[str],
    confirm: Confirm,
    select_many: SelectMany,
    *,
    previous: FeatureSelection | None = None,
) -> FeatureSelection:
    """Resolve the final feature selection for a run.

    CONTRACT:
      Inputs:
        - saved: previously persisted feature ids, or None
        - auto_detected: feature ids from detection
        - confirm: collaborator asking a yes/no question (message, default)
        - select_many: grouped multi-select collaborator
          (message, grouped options, required, initial selection)
        - previous: a rejected selection to offer again as the default;
          skips the saved/detected steps

      Outputs:
        - FeatureSelection with exactly the features the user confirmed

      Invariants:
        - A saved selection is honored only when non-empty and entirely known;
          otherwise it is discarded as a whole
        - The detection prompt is asked only without a usable saved selection
          and only when more than one feature was detected
        - The explicit choice is authoritative, including an empty choice
        - Unknown ids returned by select_many are dropped

      Algorithm:
        1. Valid saved selection -> default, source "restoredFromSaved"
        2. Else if >1 detected feature and the user accepts -> default is the
           detected set, source "detected"; otherwise default is empty
        3. Ask select_many over all groups with the default preselected
        4. Annotate members found in the default with its source, the rest
           with "userChosen"
    """
    default: list[str] = []
    default_source: Mapping[str, Provenance] = {}

    if previous is not None:
        default = list(previous.features)
        default_source = previous.provenance
    else:
        valid_saved = _usable_saved_selection(saved)
        if valid_saved is not None:
            logger.debug(f"Using saved feature selection: {valid_saved}")
            default = valid_saved
            default_source = {fid: "restoredFromSaved" for fid in valid_saved}
        elif len(auto_detected) > 1:
            detected = ordered_features(auto_detected)
            if confirm(detected_features_message(detected), True):
                default = detected
                default_source = {fid: "detected" for fid in detected}

    chosen = select_many(
        SELECT_FEATURES_MESSAGE, grouped_feature_options(), True, default
    )

    known = load_features()
    features: list[str] = []
    provenance: dict[str, Provenance] = {}
    for feature_id in chosen:
        if feature_id not in known:
            logger.warning(f"Ignoring unknown feature from selection: {feature_id}")
            continue
        if feature_id in provenance:
            continue
        features.append(feature_id)
        provenance[feature_id] = default_source.get(feature_id, "userChosen")

    logger.debug(f"Resolved feature selection: {provenance}")
    return FeatureSelection(features=tuple(features), provenance=provenance)


def require_non_empty(selection: FeatureSelection) -> FeatureSelection:
    """Return selection unchanged, or raise EmptySelectionError when empty."""
    if selection.is_empty:
        raise EmptySelectionError()
    return selection


def _usable_saved_selection(saved: Collection[str] | None) -> list[str] | None:
    if not saved:
        return None
    try:
        return check_saved_selection(saved)
    except UnknownFeatureIdError as e:
        logger.warning(f"{e}. Ignoring saved selection.")
        return None
