"""Static database configuration consumed while rendering templates."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class DatabaseMode(Enum):
    """Where a database runs."""

    MANAGED = "managed"  # provisioned by the cloud provider
    CONTAINER = "container"  # runs as a workload on the cluster


@dataclass(frozen=True)
class DatabaseOptions:
    """Per-database settings. Never mutated by the engine."""

    login: str
    password: str
    host: str
    port: int
    mode: DatabaseMode
    disk_size_in_gib: int
    database_disk_type: str
    encrypt_disk: bool = False
    activate_high_availability: bool = False
    activate_backups: bool = False
    publicly_accessible: bool = False

    def to_template_values(self) -> dict[str, Any]:
        """Template-friendly view of the options."""
        values = asdict(self)
        values["mode"] = self.mode.value
        return values
