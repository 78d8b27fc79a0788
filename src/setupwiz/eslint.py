"""ESLint setup flow: detection to a validated, rendered configuration."""

import logging
from collections.abc import Callable, Collection
from dataclasses import dataclass, field

from .constants import (
    ESLINT_CONFIG_FILE_NAMES,
    ESLINT_MINIMUM_REQUIRED_VERSION,
    ESLINT_PACKAGE_NAME,
    LINT_SCRIPTS,
)
from .detect.manifest import (
    DetectionEvidenceError,
    FileExists,
    GetDependencies,
    combined_dependencies,
)
from .detect.result import DetectionResult
from .detect.version import DependencyVersion, parse_dependency_version
from .emit import (
    DEFAULT_LINT_PATHS,
    ConfigurationArtifact,
    build_ignore_patterns,
    build_lint_scripts,
    emit_config,
)
from .registry import Framework, load_features, load_frameworks
from .selection import (
    Confirm,
    FeatureSelection,
    SelectMany,
    require_non_empty,
    resolve_selection,
)
from .validate import FeatureValidationError, ValidationResult, validate_selection

logger = logging.getLogger(__name__)

Warn = Callable[[str], None]
# Asked after a failed validation; True re-runs the feature selection
Adjust = Callable[[ValidationResult], bool]

ADJUST_SELECTION_MESSAGE = "Would you like to adjust your feature selection?"


@dataclass(frozen=True)
class SetupPlan:
    """Everything needed to apply an ESLint setup to a project."""

    detection: DetectionResult
    selection: FeatureSelection
    validation: ValidationResult
    artifact: ConfigurationArtifact
    scripts: dict[str, str] = field(default_factory=dict)
    ignore_patterns: list[str] = field(default_factory=list)

    @property
    def frameworks(self) -> list[Framework]:
        return detected_frameworks(self.detection)


def detected_frameworks(detection: DetectionResult) -> list[Framework]:
    """Registry entries for the detected frameworks, in detection order."""
    known = load_frameworks()
    return [known[item.name] for item in detection.frameworks if item.name in known]


class EslintSetup:
    """Resolve, validate and render an ESLint configuration.

    CONTRACT:
      Inputs:
        - confirm, select_many, warn: interactive collaborators
        - adjust: decides whether to re-select after a failed validation;
          defaults to asking confirm
        - saved: feature ids from a previous run, or None

      Outputs:
        - SetupPlan from plan(); nothing is written to disk

      Invariants:
        - The emitted configuration always passed validation
        - Validation never drops features on its own; the user either
          adjusts the selection or the setup stops

      Algorithm:
        1. Resolve the selection from saved, detected and chosen features
        2. Empty selection -> EmptySelectionError
        3. Validate; on failure warn with the reasons once and ask adjust.
           Yes -> resolve again with the rejected selection as default,
           go to 2. No -> FeatureValidationError (reasons already reported)
        4. Build ignore patterns, render the config, build lint scripts
    """

    def __init__(
        self,
        confirm: Confirm,
        select_many: SelectMany,
        warn: Warn,
        *,
        adjust: Adjust | None = None,
        saved: Collection[str] | None = None,
    ) -> None:
        self.confirm = confirm
        self.select_many = select_many
        self.warn = warn
        self.adjust = adjust if adjust is not None else self._ask_to_adjust
        self.saved = saved

    def _ask_to_adjust(self, validation: ValidationResult) -> bool:
        return self.confirm(ADJUST_SELECTION_MESSAGE, True)

    def resolve(
        self, detection: DetectionResult
    ) -> tuple[FeatureSelection, ValidationResult]:
        """Run the resolve/validate loop until the selection is valid.

        Raises:
            EmptySelectionError: If the user selects nothing
            FeatureValidationError: If the user declines to fix an invalid
                selection
        """
        detected_ids = detection.framework_ids
        selection = resolve_selection(
            self.saved, detection.features, self.confirm, self.select_many
        )

        while True:
            require_non_empty(selection)
            validation = validate_selection(selection, detected_ids)
            if validation.is_valid:
                return selection, validation

            self.warn(str(FeatureValidationError(validation.reasons)))
            if not self.adjust(validation):
                validation.raise_for_invalid()

            logger.debug("Re-running feature selection after validation failure")
            selection = resolve_selection(
                None,
                detection.features,
                self.confirm,
                self.select_many,
                previous=selection,
            )

    def plan(self, detection: DetectionResult) -> SetupPlan:
        selection, validation = self.resolve(detection)
        frameworks = detected_frameworks(detection)
        ignore_patterns = build_ignore_patterns(frameworks)

        return SetupPlan(
            detection=detection,
            selection=selection,
            validation=validation,
            artifact=emit_config(selection, ignore_patterns),
            scripts=build_lint_scripts(frameworks),
            ignore_patterns=ignore_patterns,
        )


def find_existing_config_files(file_exists: FileExists) -> list[str]:
    """Return ESLint config files already present in the project.

    A failing lookup counts as absent.
    """
    existing: list[str] = []
    for file_name in ESLINT_CONFIG_FILE_NAMES:
        try:
            if file_exists(file_name):
                existing.append(file_name)
        except (DetectionEvidenceError, OSError) as e:
            logger.warning(f"Could not check for {file_name}: {e}")
    return existing


def check_eslint_version(get_dependencies: GetDependencies) -> DependencyVersion | None:
    """Return the installed ESLint version when it is below the minimum.

    None means ESLint is absent, unparseable, or recent enough.
    """
    version_range = combined_dependencies(get_dependencies).get(ESLINT_PACKAGE_NAME)
    if version_range is None:
        return None

    version = parse_dependency_version(version_range)
    if version is None:
        logger.debug(f"Unparseable ESLint version range: {version_range}")
        return None

    if version.major < ESLINT_MINIMUM_REQUIRED_VERSION:
        return version
    return None


def build_summary(plan: SetupPlan) -> str:
    """Render the post-setup summary note."""
    frameworks = plan.frameworks
    features = load_features()

    frameworks_list = (
        [
            f"- {fw.display_name}{f': {fw.description}' if fw.description else ''}"
            for fw in frameworks
        ]
        if frameworks
        else ["No frameworks detected"]
    )
    features_list = [
        f"- {feature_id}: {features[feature_id].description}"
        for feature_id in plan.selection
        if feature_id in features
    ]
    framework_configs = (
        [f"Lint Paths: {', '.join(DEFAULT_LINT_PATHS)}"]
        if frameworks
        else ["No framework-specific configurations"]
    )
    descriptions = {
        info["name"]: info["description"] for info in LINT_SCRIPTS.values()
    }
    scripts_list = [
        f"- npm run {name}: {descriptions[name]}"
        if name in descriptions
        else f"- npm run {name}"
        for name in plan.scripts
    ]

    lines = [
        "ESLint configuration has been created.",
        "",
        "Detected Frameworks:",
        *frameworks_list,
        "",
        "Installed features:",
        *features_list,
        "",
        "Framework-specific configurations:",
        *framework_configs,
        "",
        "Generated scripts:",
        *scripts_list,
        "",
        "You can customize the configuration in these file:",
        f"- {plan.artifact.file_name}",
    ]
    return "\n".join(lines)
