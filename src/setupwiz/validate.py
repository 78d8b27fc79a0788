"""Cross-feature validation of a resolved selection."""

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass

from .registry import load_features

logger = logging.getLogger(__name__)


class FeatureValidationError(Exception):
    """Raised when a caller gives up on a selection that failed validation."""

    def __init__(self, reasons: Iterable[str]) -> None:
        self.reasons = tuple(reasons)
        super().__init__(
            "Configuration cannot proceed due to the following errors:\n"
            + "\n".join(f"- {reason}" for reason in self.reasons)
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate_selection: valid, or invalid with reasons."""

    reasons: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.reasons

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def invalid(cls, reasons: Iterable[str]) -> "ValidationResult":
        return cls(reasons=tuple(reasons))

    def raise_for_invalid(self) -> None:
        if not self.is_valid:
            raise FeatureValidationError(self.reasons)


def validate_selection(
    selection: Iterable[str], detected: Collection[str]
) -> ValidationResult:
    """Check the selection against capability requirements.

    A feature that requires a capability (TypeScript) is valid only when the
    framework marking that capability is among the detected frameworks.
    Unknown feature ids are skipped. Never raises and never mutates selection.
    """
    features = load_features()
    detected_ids = set(detected)
    reasons: list[str] = []

    for feature_id in selection:
        feature = features.get(feature_id)
        if feature is None or feature.requires_capability is None:
            continue
        capability = feature.requires_capability
        if capability.value not in detected_ids:
            reasons.append(
                f"{feature_id} requires {capability.display_name}, but "
                f"{capability.display_name} is not detected in your project."
            )

    if reasons:
        logger.debug(f"Selection invalid: {reasons}")
        return ValidationResult.invalid(reasons)
    return ValidationResult.valid()
