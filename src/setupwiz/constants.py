"""Shared constants for setupwiz."""

from typing import TypedDict


class ScriptInfo(TypedDict):
    """Type definition for a generated package.json script."""

    name: str
    description: str


# Saved selections live next to package.json
CONFIG_FILE_NAME = ".setupwiz.yaml"

ESLINT_PACKAGE_NAME = "eslint"
ESLINT_CONFIG_PACKAGE_NAME = "@elsikora/eslint-config"

# Installed for every selection, before feature packages
ESLINT_CORE_DEPENDENCIES: tuple[str, ...] = (
    ESLINT_PACKAGE_NAME,
    ESLINT_CONFIG_PACKAGE_NAME,
)

# Flat config (eslint.config.js) is the default from ESLint 9
ESLINT_MINIMUM_REQUIRED_VERSION = 9

ESLINT_CONFIG_FILE_NAME = "eslint.config.js"

# Existing configuration files that conflict with the generated one
ESLINT_CONFIG_FILE_NAMES: tuple[str, ...] = (
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.cjs",
    ".eslintrc.json",
    ".eslintrc.yaml",
    ".eslintrc.yml",
    "eslint.config.js",
    "eslint.config.cjs",
    "eslint.config.mjs",
    "eslint.config.ts",
)

# Always ignored, after framework-specific ignores
ESLINT_IGNORE_PATHS: tuple[str, ...] = (
    "**/node_modules/",
    "**/.git/",
    "**/dist/",
    "**/build/",
    "**/coverage/",
    "**/.vscode/",
    "**/.idea/",
    "**/*.min.js",
    "**/*.bundle.js",
)

LINT_SCRIPTS: dict[str, ScriptInfo] = {
    "lint": {"name": "lint", "description": "Lint the project"},
    "lint_fix": {"name": "lint:fix", "description": "Lint and auto-fix"},
    "lint_watch": {"name": "lint:watch", "description": "Lint on file changes"},
    "lint_types": {"name": "lint:types", "description": "Type-check with tsc"},
    "lint_types_fix": {
        "name": "lint:types:fix",
        "description": "Type-check, skipping library declarations",
    },
    "lint_all": {"name": "lint:all", "description": "Lint and type-check"},
    "lint_all_fix": {
        "name": "lint:all:fix",
        "description": "Lint with fixes and type-check",
    },
}


def confidence_marker(confidence: str) -> str:
    """Return display marker for a confidence level.

    Args:
        confidence: Confidence level string ("high" or "medium")

    Returns:
        Display marker string: "" for high, " (detected)" for medium
        confidence.
    """
    if confidence == "high":
        return ""
    return " (detected)"
