"""Version range parsing for package.json dependency entries."""

import logging
import re
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

VersionFlag = Literal[">=", ">", "<=", "<", "=", "~", "^", ""]

# Longest prefixes first so ">=" is not read as ">"
_FLAGS: tuple[VersionFlag, ...] = (">=", "<=", ">", "<", "=", "~", "^")

_PRERELEASE_PATTERN = re.compile(
    r"[-+]([a-z0-9]+(?:[.-][a-z0-9]+)*)(?:\+[a-z0-9]+(?:[.-][a-z0-9]+)*)?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class DependencyVersion:
    """A parsed dependency version range such as "^9.1.0"."""

    version: str
    flag: VersionFlag
    major: int
    minor: int
    patch: int
    prerelease_channel: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease_channel is not None


def parse_dependency_version(version_range: str) -> DependencyVersion | None:
    """Parse a package.json version range into its numeric components.

    Examples:
      - "^9.1.0" -> flag "^", 9.1.0
      - ">=8" -> flag ">=", 8.0.0
      - "~1.2.3-beta.1" -> flag "~", 1.2.3, prerelease "beta.1"

    Returns:
        DependencyVersion, or None when no major version can be read
        (tags like "latest", URLs, workspace references)
    """
    flag: VersionFlag = ""
    version = version_range.strip()
    for candidate in _FLAGS:
        if version.startswith(candidate):
            flag = candidate
            version = version[len(candidate) :].strip()
            break

    prerelease_channel: str | None = None
    version_only = version
    match = _PRERELEASE_PATTERN.search(version)
    if match:
        prerelease_channel = match.group(1)
        version_only = re.split(r"[-+]", version, maxsplit=1)[0]

    parts = version_only.split(".")
    numbers: list[int] = []
    for part in parts[:3]:
        if not part.isdigit():
            break
        numbers.append(int(part))

    if not numbers:
        logger.debug(f"Unparseable version range: {version_range!r}")
        return None

    while len(numbers) < 3:
        numbers.append(0)

    return DependencyVersion(
        version=version,
        flag=flag,
        major=numbers[0],
        minor=numbers[1],
        patch=numbers[2],
        prerelease_channel=prerelease_channel,
    )
