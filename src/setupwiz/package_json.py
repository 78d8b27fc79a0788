"""Write generated scripts into a project's package.json."""

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class PackageJsonError(Exception):
    """Raised when package.json is missing or cannot be updated."""

    pass


def read_package_json(path: Path) -> dict:
    """Parse package.json, keeping key order.

    Raises:
        PackageJsonError: If the file is missing, unreadable or not an object
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise PackageJsonError(f"No package.json found at {path}") from None
    except (OSError, ValueError) as e:
        raise PackageJsonError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, dict):
        raise PackageJsonError(f"{path} does not contain a JSON object")
    return data


def add_scripts(path: Path, scripts: Mapping[str, str]) -> list[str]:
    """Set each script in package.json, overwriting same-named entries.

    The file is rewritten atomically with two-space indentation. Returns the
    names of scripts whose command changed.
    """
    data = read_package_json(path)
    existing = data.get("scripts") or {}
    if not isinstance(existing, dict):
        raise PackageJsonError(f"{path} field 'scripts' is not an object")

    changed = [name for name, command in scripts.items() if existing.get(name) != command]
    if not changed:
        logger.debug("package.json scripts already up to date")
        return []

    existing.update(scripts)
    data["scripts"] = existing

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".package.json.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(f"Updated package.json scripts: {changed}")
    return changed
