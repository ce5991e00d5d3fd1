"""Execution context shared by every service of one engine invocation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ExecutionContext:
    """Identifiers and filesystem roots for one engine invocation.

    Attributes:
        organization_id: Owning organization identifier
        cluster_id: Target cluster identifier
        execution_id: Unique identifier of this invocation
        workspace_root_dir: Root under which per-service workspaces are created
        lib_root_dir: Root holding chart templates and provisioner modules
        resource_expiration_in_seconds: Optional TTL attached to the namespace
        dry_run_deploy: When True the provisioner plans but never applies
    """

    organization_id: str
    cluster_id: str
    execution_id: str
    workspace_root_dir: Path
    lib_root_dir: Path
    resource_expiration_in_seconds: int | None = None
    dry_run_deploy: bool = False

    def workspace_directory(self, *parts: str) -> Path:
        """Return (and create) a directory under this execution's workspace."""
        path = Path(self.workspace_root_dir, self.execution_id, *parts)
        path.mkdir(parents=True, exist_ok=True)
        return path
