"""Data types for shell command invocations.

``CommandResult`` is re-exported from ``deploy_engine.infra.k8s.controller``
so that every collaborator returns the same result type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from deploy_engine.infra.k8s.controller import CommandResult

__all__ = [
    "ChartInfo",
    "CommandResult",
]


@dataclass
class ChartInfo:
    """Parameters of one chart release.

    Attributes:
        name: Release name
        path: Rendered chart directory
        namespace: Kubernetes namespace of the release
        timeout_seconds: Maximum time helm waits for the release
        value_files: Extra values files, applied in order
        atomic: Roll back to the last good revision on failure
        selector: Label selector identifying the release's objects
    """

    name: str
    path: Path
    namespace: str
    timeout_seconds: int = 600
    value_files: list[Path] = field(default_factory=list)
    atomic: bool = True
    selector: str | None = None
