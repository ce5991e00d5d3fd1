"""Service version numbers and version-check results."""

from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_PATTERN = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<suffix>[0-9A-Za-z.-]+))?$"
)


@dataclass(frozen=True)
class VersionNumber:
    """A loosely semantic version: ``major[.minor[.patch]][-suffix]``."""

    major: int
    minor: int | None = None
    patch: int | None = None
    suffix: str | None = None

    @classmethod
    def parse(cls, raw: str) -> VersionNumber:
        """Parse a version string.

        Args:
            raw: Version string such as ``"13"``, ``"6.0.3"`` or ``"8.0-debian"``

        Returns:
            The parsed version

        Raises:
            ValueError: If the string is not a version number
        """
        match = _VERSION_PATTERN.match(raw.strip())
        if match is None:
            raise ValueError(f"`{raw}` is not a valid version number")

        minor = match.group("minor")
        patch = match.group("patch")
        return cls(
            major=int(match.group("major")),
            minor=int(minor) if minor is not None else None,
            patch=int(patch) if patch is not None else None,
            suffix=match.group("suffix"),
        )

    def __str__(self) -> str:
        version = str(self.major)
        if self.minor is not None:
            version += f".{self.minor}"
            if self.patch is not None:
                version += f".{self.patch}"
        if self.suffix:
            version += f"-{self.suffix}"
        return version


@dataclass(frozen=True)
class ServiceVersionCheckResult:
    """Outcome of checking a requested version against what is available.

    Attributes:
        requested_version: Version requested by the user
        matched_version: Version that will actually be deployed
        message: Advisory message when the two differ
    """

    requested_version: VersionNumber
    matched_version: VersionNumber
    message: str | None = None
