"""Render eslint.config.js and package.json scripts from a feature selection."""

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from .constants import (
    ESLINT_CONFIG_FILE_NAME,
    ESLINT_CONFIG_PACKAGE_NAME,
    ESLINT_CORE_DEPENDENCIES,
    ESLINT_IGNORE_PATHS,
    LINT_SCRIPTS,
)
from .dependencies import resolve_dependencies
from .registry import Capability, Framework, load_features

logger = logging.getLogger(__name__)

_FLAG_LINE = re.compile(r"^\s*(with[A-Za-z0-9]+)\s*:\s*true\s*,?\s*$", re.MULTILINE)

# Lint the whole project; framework lint_paths are informational only
DEFAULT_LINT_PATHS: tuple[str, ...] = ("./",)


@dataclass(frozen=True)
class ConfigurationArtifact:
    """A rendered configuration file plus the packages it needs."""

    text: str
    dependencies: list[str] = field(default_factory=list)
    file_name: str = ESLINT_CONFIG_FILE_NAME


def render_eslint_config(
    selection: Iterable[str], ignore_patterns: Iterable[str]
) -> str:
    """Render the flat config module enabling each selected feature."""
    features = load_features()
    flag_lines: list[str] = []
    for feature_id in selection:
        feature = features.get(feature_id)
        if feature is None:
            logger.debug(f"Skipping unknown feature in config: {feature_id}")
            continue
        flag_lines.append(f"  {feature.config_flag}: true")

    ignores = json.dumps(list(ignore_patterns), indent=2, ensure_ascii=False)
    feature_config = ",\n".join(flag_lines)

    return f"""import {{ createConfig }} from '{ESLINT_CONFIG_PACKAGE_NAME}';

const config = {{
  ignores: {ignores}
}};

export default [config,
...(await createConfig({{
{feature_config}
}}))];"""


def emit_config(
    selection: Iterable[str],
    ignore_patterns: Iterable[str],
    core_packages: Iterable[str] = ESLINT_CORE_DEPENDENCIES,
) -> ConfigurationArtifact:
    """Build the configuration artifact for a resolved selection.

    Only the selection is consulted; detection state never reaches the output
    except through the ignore patterns the caller passes in.
    """
    features = list(selection)
    return ConfigurationArtifact(
        text=render_eslint_config(features, ignore_patterns),
        dependencies=resolve_dependencies(features, core_packages),
    )


def parse_config_flags(text: str) -> set[str]:
    """Return the feature ids enabled by "withX: true" lines in a config."""
    by_flag = {feature.config_flag: feature.id for feature in load_features().values()}
    return {
        by_flag[flag] for flag in _FLAG_LINE.findall(text) if flag in by_flag
    }


def build_ignore_patterns(frameworks: Iterable[Framework]) -> list[str]:
    """Collect framework ignores followed by the default ESLint ignores.

    Ignored directories become "<dir>/**/*" globs. Duplicates keep their first
    position.
    """
    patterns: dict[str, None] = {}
    for framework in frameworks:
        for directory in framework.ignore.directories:
            patterns[f"{directory}/**/*"] = None
        patterns.update(dict.fromkeys(framework.ignore.patterns))
    patterns.update(dict.fromkeys(ESLINT_IGNORE_PATHS))
    return list(patterns)


def build_lint_scripts(frameworks: Iterable[Framework]) -> dict[str, str]:
    """Generate package.json lint scripts for the detected frameworks.

    lint:watch is added when any framework supports watch mode, the type
    checking scripts when TypeScript is detected.
    """
    frameworks = list(frameworks)
    paths = " ".join(DEFAULT_LINT_PATHS) or "."

    scripts = {
        LINT_SCRIPTS["lint"]["name"]: f"eslint {paths}",
        LINT_SCRIPTS["lint_fix"]["name"]: f"eslint --fix {paths}",
    }

    if any(framework.supports_watch for framework in frameworks):
        scripts[LINT_SCRIPTS["lint_watch"]["name"]] = f"npx eslint-watch {paths}"

    if any(framework.id == Capability.TYPESCRIPT.value for framework in frameworks):
        scripts[LINT_SCRIPTS["lint_types"]["name"]] = "tsc --noEmit"
        scripts[LINT_SCRIPTS["lint_types_fix"]["name"]] = "tsc --noEmit --skipLibCheck"
        scripts[LINT_SCRIPTS["lint_all"]["name"]] = "npm run lint && npm run lint:types"
        scripts[LINT_SCRIPTS["lint_all_fix"]["name"]] = (
            "npm run lint:fix && npm run lint:types:fix"
        )

    return scripts
