"""Main CLI entry point for setupwiz."""

import logging
import signal
import subprocess
import sys
from collections.abc import Collection
from importlib.metadata import version
from pathlib import Path

import click

from . import wizard
from .config import Config, ConfigVersionError, load_saved_selection
from .constants import CONFIG_FILE_NAME, ESLINT_MINIMUM_REQUIRED_VERSION
from .detect import DetectionEvidenceError, ProjectEvidence, detect
from .detect.cli_integration import display_detection_json, display_detection_summary
from .detect.manifest import PACKAGE_JSON
from .eslint import (
    EslintSetup,
    SetupPlan,
    build_summary,
    check_eslint_version,
    find_existing_config_files,
)
from .package_json import PackageJsonError, add_scripts
from .registry import RegistryError, required_features
from .selection import EmptySelectionError, GroupedOptions
from .spinner import spinner
from .validate import FeatureValidationError, ValidationResult, validate_selection

logger = logging.getLogger(__name__)

try:
    from ._build_info import __commit__
except ImportError:
    # Development mode - read from git
    def _get_git_commit() -> str:
        repo_root = Path(__file__).parent.parent.parent
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--short", "HEAD"],
                cwd=repo_root,
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout.strip()
        except (subprocess.CalledProcessError, FileNotFoundError):
            return "unknown"

    __commit__ = _get_git_commit()


def _sigint_handler(signum: int, frame: object) -> None:
    """Raise KeyboardInterrupt so finally blocks restore the terminal."""
    click.echo("\nInterrupted.", err=True)
    raise KeyboardInterrupt


def _require_interactive_terminal() -> None:
    """Check that stdin is an interactive terminal.

    Feature selection uses menu prompts, which hang without a TTY in CI or
    with piped input.

    Raises:
        SystemExit: If stdin is not a TTY.
    """
    if not sys.stdin.isatty():
        click.echo(
            "Interactive terminal required. "
            "Use --yes to accept detected or saved features.",
            err=True,
        )
        raise SystemExit(1)


class _AcceptDefaults:
    """Non-interactive collaborators for --yes.

    Every prompt takes its default. After a failed validation the selection
    is adjusted by dropping the features that validation rejected.
    """

    def __init__(self, detected_frameworks: Collection[str]) -> None:
        self.detected_frameworks = frozenset(detected_frameworks)
        self._adjusting = False

    def confirm(self, message: str, default: bool) -> bool:
        return default

    def adjust(self, validation: ValidationResult) -> bool:
        self._adjusting = True
        return True

    def select_many(
        self,
        message: str,
        grouped: GroupedOptions,
        required: bool,
        initial: list[str],
    ) -> list[str]:
        chosen = list(initial)
        if self._adjusting:
            self._adjusting = False
            chosen = [
                feature_id
                for feature_id in chosen
                if validate_selection([feature_id], self.detected_frameworks).is_valid
            ]
            logger.debug(f"Dropped unsupported features, keeping {chosen}")
        if chosen or not required:
            return chosen
        return required_features()


def _prepare_existing_setup(
    evidence: ProjectEvidence, *, yes: bool, dry_run: bool
) -> list[str]:
    """Handle old config files and outdated ESLint before planning.

    Returns the config files to delete once the new config is written.

    Raises:
        SystemExit: If the user declines to replace files or upgrade ESLint
    """
    existing = find_existing_config_files(evidence.file_exists)
    if existing:
        files_list = "\n".join(f"- {name}" for name in existing)
        message = (
            f"Existing ESLint configuration files detected:\n{files_list}\n\n"
            "Do you want to delete them?"
        )
        if not (yes or dry_run or click.confirm(message, default=True)):
            wizard.warn("Existing ESLint configuration files detected. Setup aborted.")
            raise SystemExit(1)

    outdated = check_eslint_version(evidence.get_dependencies)
    if outdated is not None:
        click.echo(
            f"Detected ESLint version {outdated.major}, which is lower than "
            f"required version {ESLINT_MINIMUM_REQUIRED_VERSION}."
        )
        if not (
            yes
            or dry_run
            or click.confirm(
                f"Do you want to replace ESLint version {outdated.major} "
                "with the latest version?",
                default=True,
            )
        ):
            wizard.warn(
                "ESLint update cancelled. Setup cannot proceed with the current version."
            )
            raise SystemExit(1)

    return existing


def _write_plan(
    plan: SetupPlan, project_path: Path, config_path: Path, stale_files: list[str]
) -> None:
    """Write the config, scripts and saved selection for a finished plan."""
    for name in stale_files:
        if name != plan.artifact.file_name:
            (project_path / name).unlink(missing_ok=True)
            logger.debug(f"Deleted old ESLint config {name}")

    (project_path / plan.artifact.file_name).write_text(
        plan.artifact.text + "\n", encoding="utf-8"
    )
    click.echo(f"\nCreated {plan.artifact.file_name}")

    add_scripts(project_path / PACKAGE_JSON, plan.scripts)

    Config(eslint_features=list(plan.selection)).save(config_path)
    click.echo(f"Saved feature selection to {CONFIG_FILE_NAME}")


@click.command()
@click.version_option(
    version=f"{version('setupwiz')} ({__commit__})",
    prog_name="setupwiz",
)
@click.option(
    "--detect",
    "detect_only",
    is_flag=True,
    help="Run detection only and output results as JSON",
)
@click.option(
    "--no-detect",
    is_flag=True,
    help="Skip auto-detection and choose every feature manually",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Accept saved or detected features without prompting",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the configuration and packages without writing files",
)
@click.option("--debug", is_flag=True, help="Enable verbose detection output")
def main(
    detect_only: bool = False,
    no_detect: bool = False,
    yes: bool = False,
    dry_run: bool = False,
    debug: bool = False,
) -> None:
    """setupwiz - ESLint setup for Node.js projects.

    Run in a project directory to detect frameworks and generate
    eslint.config.js with matching features.
    """
    signal.signal(signal.SIGINT, _sigint_handler)

    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[DEBUG] %(name)s: %(message)s",
        )

    project_path = Path.cwd().resolve()
    config_path = project_path / CONFIG_FILE_NAME

    if detect_only:
        display_detection_json(detect(project_path))
        return

    if not (project_path / PACKAGE_JSON).is_file():
        click.echo(f"No {PACKAGE_JSON} found in current directory.", err=True)
        raise SystemExit(1)

    if not yes:
        _require_interactive_terminal()

    try:
        saved = load_saved_selection(config_path)
    except ConfigVersionError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1) from None

    try:
        stale_files = _prepare_existing_setup(
            ProjectEvidence(project_path), yes=yes, dry_run=dry_run
        )

        with spinner("Detecting frameworks..."):
            detection = detect(project_path, no_detect=no_detect)

        if yes:
            defaults = _AcceptDefaults(detection.framework_ids)
            setup = EslintSetup(
                defaults.confirm,
                defaults.select_many,
                wizard.warn,
                adjust=defaults.adjust,
                saved=saved,
            )
        else:
            display_detection_summary(detection)
            setup = EslintSetup(
                wizard.confirm, wizard.select_many, wizard.warn, saved=saved
            )

        plan = setup.plan(detection)
    except KeyboardInterrupt:
        click.echo("\nSetup cancelled.")
        raise SystemExit(130) from None
    except EmptySelectionError as e:
        wizard.warn(str(e))
        raise SystemExit(1) from None
    except FeatureValidationError:
        # Reasons were already reported by the setup loop
        click.echo("ESLint setup aborted.", err=True)
        raise SystemExit(1) from None
    except (DetectionEvidenceError, RegistryError) as e:
        click.echo(str(e), err=True)
        raise SystemExit(1) from None

    install_command = f"npm install --save-dev {' '.join(plan.artifact.dependencies)}"

    if dry_run:
        click.echo(f"\n{plan.artifact.file_name}:\n")
        click.echo(plan.artifact.text)
        click.echo("\nScripts:")
        for name, command in plan.scripts.items():
            click.echo(f"  {name}: {command}")
        click.echo(f"\nInstall with:\n  {install_command}")
        return

    try:
        _write_plan(plan, project_path, config_path, stale_files)
    except (OSError, PackageJsonError) as e:
        click.echo(f"Failed to write configuration: {e}", err=True)
        raise SystemExit(1) from None

    click.echo(f"\n{build_summary(plan)}")
    click.echo(f"\nInstall the required packages with:\n  {install_command}")


if __name__ == "__main__":
    main()
