"""Tests for setupwiz.eslint - the setup flow from detection to artifact."""

from unittest.mock import MagicMock

import pytest

from setupwiz.detect import detect_with
from setupwiz.detect.manifest import DependencySection, DetectionEvidenceError
from setupwiz.detect.result import DetectedItem, DetectionResult
from setupwiz.eslint import (
    ADJUST_SELECTION_MESSAGE,
    EslintSetup,
    build_summary,
    check_eslint_version,
    detected_frameworks,
    find_existing_config_files,
)
from setupwiz.selection import EmptySelectionError
from setupwiz.validate import FeatureValidationError


def sections(
    prod: dict[str, str] | None = None, dev: dict[str, str] | None = None
):
    data = {
        DependencySection.PRODUCTION: prod or {},
        DependencySection.DEVELOPMENT: dev or {},
    }
    return data.__getitem__


def react_detection() -> DetectionResult:
    return detect_with(
        lambda _path: False,
        sections(prod={"react": "18.0.0", "react-dom": "18.0.0"}),
    )


class TestEslintSetupPlan:
    """End-to-end planning with scripted collaborators."""

    def test_react_project_with_declined_detection(self) -> None:
        detection = react_detection()
        confirm = MagicMock(return_value=False)
        select_many = MagicMock(return_value=["javascript"])
        warn = MagicMock()

        plan = EslintSetup(confirm, select_many, warn).plan(detection)

        assert detection.framework_ids >= {"react"}
        assert {"react", "javascript"} <= detection.features
        assert plan.selection.features == ("javascript",)
        assert plan.validation.is_valid
        assert plan.artifact.dependencies == ["eslint", "@elsikora/eslint-config"]
        assert "  withJavascript: true\n" in plan.artifact.text
        assert "withReact" not in plan.artifact.text
        assert plan.scripts["lint"] == "eslint ./"
        # next also matches react through its "either" indicators
        assert "lint:watch" in plan.scripts
        assert "lint:types" not in plan.scripts
        warn.assert_not_called()

    def test_saved_selection_flows_into_artifact(self) -> None:
        select_many = MagicMock(side_effect=lambda _m, _o, _r, initial: initial)

        plan = EslintSetup(
            MagicMock(), select_many, MagicMock(), saved=["javascript", "jsdoc"]
        ).plan(DetectionResult(features=frozenset({"javascript"})))

        assert plan.selection.provenance == {
            "javascript": "restoredFromSaved",
            "jsdoc": "restoredFromSaved",
        }
        assert "eslint-plugin-jsdoc" in plan.artifact.dependencies

    def test_empty_selection_raises(self) -> None:
        setup = EslintSetup(MagicMock(), MagicMock(return_value=[]), MagicMock())

        with pytest.raises(EmptySelectionError):
            setup.plan(DetectionResult())

    def test_ignore_patterns_include_framework_entries(self) -> None:
        detection = detect_with(
            lambda path: path == "angular.json", sections()
        )
        setup = EslintSetup(
            MagicMock(return_value=False),
            MagicMock(return_value=["javascript"]),
            MagicMock(),
        )

        plan = setup.plan(detection)

        assert plan.ignore_patterns[0] == ".angular/**/*"
        assert '".angular/**/*"' in plan.artifact.text


class TestValidationRetry:
    """The resolve/validate loop."""

    def test_declining_adjustment_raises_validation_error(self) -> None:
        detection = react_detection()
        # Accept detected features, then refuse to adjust
        confirm = MagicMock(side_effect=[True, False])
        select_many = MagicMock(side_effect=lambda _m, _o, _r, initial: initial)
        warn = MagicMock()

        with pytest.raises(FeatureValidationError) as exc_info:
            EslintSetup(confirm, select_many, warn).plan(detection)

        assert exc_info.value.reasons == (
            "typescript requires TypeScript, but TypeScript is not detected "
            "in your project.",
        )
        warn.assert_called_once()
        assert "typescript requires TypeScript" in warn.call_args.args[0]
        assert confirm.call_args.args == (ADJUST_SELECTION_MESSAGE, True)

    def test_adjusting_reruns_selection_with_rejected_default(self) -> None:
        detection = react_detection()
        confirm = MagicMock(side_effect=[True, True])
        first_choice = ["javascript", "react", "typescript"]
        select_many = MagicMock(side_effect=[first_choice, ["javascript", "react"]])
        warn = MagicMock()

        plan = EslintSetup(confirm, select_many, warn).plan(detection)

        assert select_many.call_count == 2
        assert select_many.call_args_list[1].args[3] == first_choice
        assert plan.selection.features == ("javascript", "react")
        assert plan.selection.provenance == {
            "javascript": "detected",
            "react": "detected",
        }
        assert plan.validation.is_valid
        assert "withTypescript" not in plan.artifact.text

    def test_adjust_collaborator_replaces_confirm(self) -> None:
        confirm = MagicMock(return_value=True)
        adjust = MagicMock(return_value=False)
        select_many = MagicMock(side_effect=lambda _m, _o, _r, initial: initial)

        with pytest.raises(FeatureValidationError):
            EslintSetup(confirm, select_many, MagicMock(), adjust=adjust).plan(
                react_detection()
            )

        adjust.assert_called_once()
        assert adjust.call_args.args[0].reasons == (
            "typescript requires TypeScript, but TypeScript is not detected "
            "in your project.",
        )
        assert all(
            call.args[0] != ADJUST_SELECTION_MESSAGE for call in confirm.call_args_list
        )

    def test_emptied_retry_raises_empty_selection(self) -> None:
        confirm = MagicMock(side_effect=[True, True])
        select_many = MagicMock(side_effect=[["nest"], []])

        with pytest.raises(EmptySelectionError):
            EslintSetup(confirm, select_many, MagicMock()).plan(
                react_detection()
            )

    def test_typescript_project_is_valid_first_time(self) -> None:
        detection = detect_with(
            lambda path: path == "tsconfig.json",
            sections(prod={"@nestjs/core": "10"}, dev={"typescript": "5"}),
        )
        select_many = MagicMock(side_effect=lambda _m, _o, _r, initial: initial)
        warn = MagicMock()

        plan = EslintSetup(MagicMock(return_value=True), select_many, warn).plan(
            detection
        )

        assert "nest" in plan.selection
        assert "typescript" in plan.selection
        assert plan.scripts["lint:types"] == "tsc --noEmit"
        warn.assert_not_called()


class TestExistingSetup:
    """Tests for find_existing_config_files() and check_eslint_version()."""

    def test_finds_legacy_and_flat_configs(self) -> None:
        present = {".eslintrc.json", "eslint.config.mjs"}

        assert find_existing_config_files(present.__contains__) == [
            ".eslintrc.json",
            "eslint.config.mjs",
        ]

    def test_failing_lookup_counts_as_absent(self) -> None:
        def file_exists(path: str) -> bool:
            if path == ".eslintrc":
                raise DetectionEvidenceError("denied")
            return path == ".eslintrc.js"

        assert find_existing_config_files(file_exists) == [".eslintrc.js"]

    def test_outdated_eslint_reported(self) -> None:
        version = check_eslint_version(sections(dev={"eslint": "^8.57.0"}))

        assert version is not None
        assert version.major == 8

    def test_current_eslint_accepted(self) -> None:
        assert check_eslint_version(sections(dev={"eslint": "^9.5.0"})) is None

    def test_missing_eslint_accepted(self) -> None:
        assert check_eslint_version(sections()) is None

    def test_unparseable_version_accepted(self) -> None:
        assert check_eslint_version(sections(dev={"eslint": "latest"})) is None

    def test_unreadable_manifest_accepted(self) -> None:
        def fail(section: DependencySection) -> dict[str, str]:
            raise DetectionEvidenceError("bad json")

        assert check_eslint_version(fail) is None


class TestSummary:
    """Tests for build_summary()."""

    def test_summary_sections(self) -> None:
        detection = detect_with(
            lambda path: path == "tsconfig.json", sections(dev={"typescript": "5"})
        )
        plan = EslintSetup(
            MagicMock(return_value=False),
            MagicMock(return_value=["javascript", "typescript"]),
            MagicMock(),
        ).plan(detection)

        summary = build_summary(plan)

        assert summary.startswith("ESLint configuration has been created.")
        assert "- TypeScript: TypeScript configuration project" in summary
        assert "- typescript: " in summary
        assert "Lint Paths: ./" in summary
        assert "- npm run lint:all:fix: Lint with fixes and type-check" in summary
        assert summary.endswith("- eslint.config.js")

    def test_summary_without_frameworks(self) -> None:
        plan = EslintSetup(
            MagicMock(), MagicMock(return_value=["javascript"]), MagicMock()
        ).plan(DetectionResult())

        summary = build_summary(plan)

        assert "No frameworks detected" in summary
        assert "No framework-specific configurations" in summary


class TestDetectedFrameworks:
    def test_unknown_ids_skipped(self) -> None:
        detection = DetectionResult(
            frameworks=(
                DetectedItem("react", "high", "package.json", "react"),
                DetectedItem("gone", "high", "package.json", "gone"),
            )
        )

        assert [fw.id for fw in detected_frameworks(detection)] == ["react"]
