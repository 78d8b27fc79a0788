"""Shared utility functions for project detection.

This module provides path validation used by the evidence sources so that
detection never reads outside the project root, even through a symlink.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def is_safe_path(file_path: Path, project_root: Path) -> bool:
    """Check if file path is safe to read (project boundary protection).

    Symlinks are followed: a link whose target resolves inside the project
    root is safe, one that escapes it is not.

    Args:
        file_path: Path to validate
        project_root: Project root directory

    Returns:
        True if path is safe to read, False otherwise
    """
    try:
        resolved = file_path.resolve()
        project_resolved = project_root.resolve()
        resolved.relative_to(project_resolved)
        return True
    except ValueError:
        logger.warning(f"File outside project boundary: {file_path}")
        return False
    except (OSError, RuntimeError) as e:
        logger.warning(f"Could not resolve {file_path}: {e}")
        return False


def project_file(project_root: Path, relative_path: str) -> Path | None:
    """Resolve a registry-relative path against the project root.

    Returns:
        The candidate path, or None for absolute paths and paths that
        climb out of the project with "..".
    """
    candidate = Path(relative_path)
    if candidate.is_absolute() or ".." in candidate.parts:
        logger.debug(f"Rejecting indicator path outside project: {relative_path}")
        return None
    return project_root / candidate
