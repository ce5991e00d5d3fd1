"""Cluster-facing contract and the value types it returns.

Queries raise ``CommandError`` when the cluster cannot answer. Mutations
return a ``CommandResult`` so callers decide whether a failure matters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from deploy_engine.errors import CommandError


@dataclass
class CommandResult:
    """Outcome of one external command or cluster mutation."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @classmethod
    def not_run(cls, error: OSError) -> CommandResult:
        """Failed result for an executable that could not be started.

        Uses the shell conventions: 127 when the binary is missing, 126 when
        it exists but cannot be executed.
        """
        code = 127 if isinstance(error, FileNotFoundError) else 126
        return cls(success=False, stderr=str(error), returncode=code)

    def to_error(self, message: str) -> CommandError:
        """Build the collaborator error describing this failed result."""
        details = "\n".join(part for part in (self.stdout, self.stderr) if part)
        return CommandError(
            message,
            full_details=details or None,
            returncode=self.returncode,
        )

    def raise_for_status(self, message: str) -> None:
        if not self.success:
            raise self.to_error(message)


class PodPhase(Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw: str | None) -> PodPhase:
        try:
            return cls(raw or "Unknown")
        except ValueError:
            return cls.UNKNOWN


class ScalingKind(Enum):
    DEPLOYMENT = "deployment"
    STATEFULSET = "statefulset"


@dataclass
class PodCondition:
    type: str
    status: str
    reason: str | None = None
    message: str | None = None


@dataclass
class ContainerLastState:
    """What a container reported before its current run."""

    terminated_exit_code: int | None = None
    terminated_message: str | None = None
    waiting_message: str | None = None


@dataclass
class PodInfo:
    """Pod status as seen by the readiness and diagnostics code."""

    name: str
    namespace: str
    phase: PodPhase
    status: str = ""
    restarts: int = 0
    ready: bool = False
    conditions: list[PodCondition] = field(default_factory=list)
    last_states: list[ContainerLastState] = field(default_factory=list)


@dataclass
class ServiceInfo:
    name: str
    type: str
    cluster_ip: str = ""


@dataclass
class PvcInfo:
    name: str
    status: str
    capacity: str = ""


@dataclass
class EventInfo:
    """One namespace event, flattened for display."""

    type: str
    reason: str
    message: str | None = None
    last_timestamp: str = ""
    involved_object: str = ""


class KubernetesController(ABC):
    """Operations the engine needs from a cluster.

    Implementations are async; blocking callers go through ``run_sync``.
    """

    @abstractmethod
    async def create_namespace(
        self,
        namespace: str,
        labels: dict[str, str] | None = None,
    ) -> CommandResult:
        """Ensure ``namespace`` exists and carries ``labels``.

        An already existing namespace counts as success; its labels are
        overwritten with the given values.
        """
        ...

    # Pods

    @abstractmethod
    async def get_pods(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PodInfo]:
        """Pods of ``namespace``, optionally narrowed by ``label_selector``.

        Raises:
            CommandError: If the cluster cannot be queried
        """
        ...

    @abstractmethod
    async def delete_pod(
        self,
        namespace: str,
        name: str,
        *,
        force: bool = True,
    ) -> CommandResult:
        """Delete one pod, skipping the grace period when ``force``."""
        ...

    @abstractmethod
    async def check_pods_ready(self, namespace: str, label_selector: str) -> bool:
        """True once any pod behind ``label_selector`` has Ready=True.

        Raises:
            CommandError: If the cluster cannot be queried
        """
        ...

    @abstractmethod
    async def get_pod_logs(
        self,
        namespace: str,
        label_selector: str,
        *,
        tail: int = 100,
    ) -> list[str]:
        """Up to ``tail`` recent lines per container behind the selector.

        Raises:
            CommandError: If the logs cannot be fetched
        """
        ...

    # Workloads and secrets

    @abstractmethod
    async def scale_replicas(
        self,
        namespace: str,
        label_selector: str,
        kind: ScalingKind,
        replicas: int,
    ) -> CommandResult:
        """Set the replica count of every ``kind`` workload behind the selector."""
        ...

    @abstractmethod
    async def delete_secret(self, namespace: str, name: str) -> CommandResult: ...

    # Status

    @abstractmethod
    async def get_events(self, namespace: str) -> list[EventInfo]:
        """Raises ``CommandError`` when events cannot be listed."""
        ...

    @abstractmethod
    async def get_services(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[ServiceInfo]: ...

    @abstractmethod
    async def get_pvcs(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PvcInfo]: ...
