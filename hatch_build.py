"""Hatch build hook recording the git commit in the built package."""

import subprocess
from pathlib import Path

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


def get_git_commit() -> str:
    """Return the short hash of HEAD, or "unknown" outside a checkout."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown"


class BuildInfoHook(BuildHookInterface):
    """Write setupwiz/_build_info.py so --version can report the commit."""

    PLUGIN_NAME = "build-info"

    def initialize(self, version: str, build_data: dict) -> None:
        build_info_path = Path(self.root) / "src" / "setupwiz" / "_build_info.py"
        build_info_path.write_text(f'__commit__ = "{get_git_commit()}"\n')

        build_data.setdefault("force_include", {})
        build_data["force_include"][str(build_info_path)] = "setupwiz/_build_info.py"
