"""Database versions available per engine and hosting mode."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from deploy_engine.errors import CommandError
from deploy_engine.models.database import DatabaseMode
from deploy_engine.models.service_type import DatabaseKind
from deploy_engine.models.version import VersionNumber

_CONTAINER = DatabaseMode.CONTAINER
_MANAGED = DatabaseMode.MANAGED

DEFAULT_DATABASE_VERSIONS: dict[tuple[DatabaseKind, DatabaseMode], tuple[str, ...]] = {
    (DatabaseKind.POSTGRESQL, _CONTAINER): (
        "10.23.0",
        "11.22.0",
        "12.17.0",
        "13.13.0",
        "14.10.0",
        "15.5.0",
    ),
    (DatabaseKind.POSTGRESQL, _MANAGED): (
        "10.21",
        "11.16",
        "12.11",
        "13.7",
        "14.3",
        "15.2",
    ),
    (DatabaseKind.MYSQL, _CONTAINER): ("5.7.44", "8.0.35"),
    (DatabaseKind.MYSQL, _MANAGED): ("5.7.42", "8.0.33"),
    (DatabaseKind.MONGODB, _CONTAINER): ("4.4.15", "5.0.10", "6.0.12"),
    (DatabaseKind.MONGODB, _MANAGED): ("4.0.0", "5.0.0"),
    (DatabaseKind.REDIS, _CONTAINER): ("6.2.14", "7.0.15"),
    (DatabaseKind.REDIS, _MANAGED): ("6.2", "7.0"),
}


def _sort_key(version: VersionNumber) -> tuple[int, int, int]:
    return version.major, version.minor or 0, version.patch or 0


def _matches(requested: VersionNumber, candidate: VersionNumber) -> bool:
    """Whether ``candidate`` satisfies every component given in ``requested``."""
    if requested.major != candidate.major:
        return False
    if requested.minor is not None and requested.minor != candidate.minor:
        return False
    if requested.patch is not None and requested.patch != candidate.patch:
        return False
    return True


@dataclass(frozen=True)
class DatabaseVersionCatalog:
    """Resolves a requested database version to a deployable one.

    A request only pins the components it gives: ``"13"`` resolves to the
    latest ``13.x.y`` available, ``"13.7"`` to the latest ``13.7.y``.
    """

    versions: Mapping[tuple[DatabaseKind, DatabaseMode], tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_DATABASE_VERSIONS)
    )

    def supported_versions(
        self, kind: DatabaseKind, mode: DatabaseMode
    ) -> tuple[str, ...]:
        return self.versions.get((kind, mode), ())

    def resolve(self, kind: DatabaseKind, mode: DatabaseMode, requested: str) -> str:
        """Return the latest available version matching ``requested``.

        Raises:
            CommandError: If the request is malformed or nothing matches
        """
        try:
            wanted = VersionNumber.parse(requested)
        except ValueError as e:
            raise CommandError(str(e), full_details=requested) from e

        candidates = [
            (VersionNumber.parse(raw), raw)
            for raw in self.supported_versions(kind, mode)
        ]
        matching = [
            (version, raw) for version, raw in candidates if _matches(wanted, version)
        ]
        if not matching:
            raise CommandError(
                f"{kind.value} version `{requested}` is not available "
                f"in {mode.value} mode"
            )
        return max(matching, key=lambda item: _sort_key(item[0]))[1]


DEFAULT_VERSION_CATALOG = DatabaseVersionCatalog()
