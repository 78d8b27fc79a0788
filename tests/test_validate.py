"""Tests for setupwiz.validate - capability checks on a selection."""

import pytest

from setupwiz.validate import (
    FeatureValidationError,
    ValidationResult,
    validate_selection,
)


class TestValidateSelection:
    """Tests for validate_selection()."""

    def test_selection_without_requirements_is_valid(self) -> None:
        result = validate_selection(["javascript", "react", "json"], set())

        assert result.is_valid
        assert result == ValidationResult.valid()

    def test_typescript_feature_without_typescript_is_invalid(self) -> None:
        result = validate_selection(["javascript", "typescript"], {"react"})

        assert not result.is_valid
        assert result.reasons == (
            "typescript requires TypeScript, but TypeScript is not detected "
            "in your project.",
        )

    def test_one_reason_per_offending_feature(self) -> None:
        result = validate_selection(["nest", "javascript", "typeorm"], set())

        assert [reason.split()[0] for reason in result.reasons] == ["nest", "typeorm"]

    def test_typescript_detected_makes_selection_valid(self) -> None:
        result = validate_selection(
            ["typescript", "nest", "typeorm"], {"typescript", "nest"}
        )

        assert result.is_valid

    def test_nest_framework_alone_does_not_satisfy_typescript(self) -> None:
        """Only the framework whose id is the capability counts."""
        result = validate_selection(["nest"], {"nest"})

        assert not result.is_valid

    def test_unknown_features_are_skipped(self) -> None:
        assert validate_selection(["react-lint"], set()).is_valid

    def test_selection_not_mutated(self) -> None:
        selection = ["typescript"]

        validate_selection(selection, set())

        assert selection == ["typescript"]


class TestValidationResult:
    """Tests for ValidationResult helpers."""

    def test_raise_for_invalid(self) -> None:
        result = ValidationResult.invalid(["nest requires TypeScript"])

        with pytest.raises(FeatureValidationError) as exc_info:
            result.raise_for_invalid()

        assert exc_info.value.reasons == ("nest requires TypeScript",)
        assert str(exc_info.value) == (
            "Configuration cannot proceed due to the following errors:\n"
            "- nest requires TypeScript"
        )

    def test_valid_result_does_not_raise(self) -> None:
        ValidationResult.valid().raise_for_invalid()
