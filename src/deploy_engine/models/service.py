"""Base service model.

A service is one deployable unit: an application, a router or a
database. Concrete kinds live in ``deploy_engine.services``; this module
holds the identity, sizing and exposure they share, and the accessors
derived from them.
"""

from __future__ import annotations

import re
import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from deploy_engine.events.details import (
    EnvironmentStep,
    EventDetails,
    ProgressScope,
    ProgressScopeKind,
    Transmitter,
)
from deploy_engine.events.listeners import Listener
from deploy_engine.models.action import Action
from deploy_engine.models.context import ExecutionContext
from deploy_engine.models.service_type import ServiceCategory, ServiceType

if TYPE_CHECKING:
    from deploy_engine.target import DeploymentTarget, Environment, Kubernetes

_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9-]+")
MAX_SANITIZED_NAME_LENGTH = 63  # Kubernetes DNS label limit
IS_LISTENING_TIMEOUT_SECONDS = 1.0


def sanitize_name(name: str) -> str:
    """Turn a display name into a valid Kubernetes DNS label.

    Example:
        >>> sanitize_name("App Sanitized")
        'app-sanitized'
    """
    sanitized = _INVALID_NAME_CHARS.sub("-", name.lower()).strip("-")
    return sanitized[:MAX_SANITIZED_NAME_LENGTH].rstrip("-")


@dataclass(frozen=True, kw_only=True)
class Service(ABC):
    """Identity, sizing and exposure shared by every service kind.

    Attributes:
        context: Execution context of the current invocation
        id: Short service id
        long_id: Service UUID
        name: Display name
        version: Declared version
        action: Desired state for this invocation
        private_port: Port exposed inside the cluster, if any
        total_cpus: CPU request (Kubernetes quantity)
        cpu_burst: CPU limit (Kubernetes quantity)
        total_ram_in_mib: Memory request and limit
        min_instances: Minimum replica count
        max_instances: Maximum replica count
        publicly_accessible: Whether the service is exposed publicly
        listeners: Ordered progress listeners
    """

    context: ExecutionContext
    id: str
    long_id: str
    name: str
    version: str
    action: Action
    private_port: int | None = None
    total_cpus: str = "500m"
    cpu_burst: str = "500m"
    total_ram_in_mib: int = 512
    min_instances: int = 1
    max_instances: int = 1
    publicly_accessible: bool = False
    listeners: tuple[Listener, ...] = ()

    @property
    @abstractmethod
    def service_type(self) -> ServiceType:
        """Type of this service."""

    @property
    @abstractmethod
    def selector(self) -> str | None:
        """Label selector matching the cluster objects of this service."""

    @abstractmethod
    def template_context(self, target: DeploymentTarget) -> dict[str, Any]:
        """Values used to render this service's templates."""

    # =========================================================================
    # Derived Accessors
    # =========================================================================

    @property
    def sanitized_name(self) -> str:
        return sanitize_name(self.name)

    def name_with_id(self) -> str:
        return f"{self.name} ({self.id})"

    def name_with_id_and_version(self) -> str:
        return f"{self.name} ({self.id}) version: {self.version}"

    def workspace_directory(self) -> Path:
        """Per-service workspace: ``<root>/<execution id>/<category dir>/<name>``."""
        return self.context.workspace_directory(
            self.service_type.workspace_dir_name, self.name
        )

    def fqdn(self, target: DeploymentTarget, fqdn: str, is_managed: bool) -> str:
        """Address consumers should use to reach this service.

        Public services keep their public fqdn. Private ones get a
        cluster-local name: managed resources are reached through their
        external-name alias, self-hosted ones through their service name.
        """
        if self.publicly_accessible:
            return fqdn
        constants = target.constants
        domain = f"{target.namespace}.{constants.CLUSTER_DOMAIN}"
        if is_managed:
            return f"{self.id}{constants.MANAGED_DNS_SUFFIX}.{domain}"
        return f"{self.sanitized_name}.{domain}"

    def is_listening(self, ip: str) -> bool:
        """Best-effort TCP connect to the private port. Not a readiness check."""
        if self.private_port is None:
            return False
        try:
            with socket.create_connection(
                (ip, self.private_port), timeout=IS_LISTENING_TIMEOUT_SECONDS
            ):
                return True
        except OSError:
            return False

    def progress_scope(self) -> ProgressScope:
        match self.service_type.category:
            case ServiceCategory.APPLICATION:
                kind = ProgressScopeKind.APPLICATION
            case ServiceCategory.DATABASE:
                kind = ProgressScopeKind.DATABASE
            case ServiceCategory.ROUTER:
                kind = ProgressScopeKind.ROUTER
        return ProgressScope(kind=kind, id=self.id)

    def event_details(self, stage: EnvironmentStep) -> EventDetails:
        return EventDetails(
            organization_id=self.context.organization_id,
            cluster_id=self.context.cluster_id,
            execution_id=self.context.execution_id,
            stage=stage,
            transmitter=Transmitter(
                kind=self.service_type.category.value, id=self.id, name=self.name
            ),
        )


def default_template_context(
    service: Service,
    kubernetes: Kubernetes,
    environment: Environment,
) -> dict[str, Any]:
    """Template values common to every service kind."""
    context: dict[str, Any] = {
        "id": service.id,
        "long_id": service.long_id,
        "owner_id": environment.owner_id,
        "project_id": environment.project_id,
        "project_long_id": environment.project_long_id,
        "organization_id": environment.organization_id,
        "organization_long_id": environment.organization_long_id,
        "environment_id": environment.id,
        "environment_long_id": environment.long_id,
        "region": kubernetes.region,
        "zone": kubernetes.zone,
        "name": service.name,
        "sanitized_name": service.sanitized_name,
        "namespace": environment.namespace,
        "cluster_name": kubernetes.name,
        "total_cpus": service.total_cpus,
        "cpu_burst": service.cpu_burst,
        "total_ram_in_mib": service.total_ram_in_mib,
        "min_instances": service.min_instances,
        "max_instances": service.max_instances,
        "is_private_port": service.private_port is not None,
        "version": service.version,
    }
    if service.private_port is not None:
        context["private_port"] = service.private_port
    return context
