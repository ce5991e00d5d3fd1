"""Deployment target: the cluster, the environment and their client handles.

A ``DeploymentTarget`` is built once per engine invocation and passed, read
only, to every deployer call of that invocation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from deploy_engine.constants import DEFAULT_CONSTANTS, EngineConstants
from deploy_engine.errors import KubeconfigError
from deploy_engine.events.details import EventDetails
from deploy_engine.infra.k8s import Kr8sController, KubernetesController
from deploy_engine.infra.shell_commands import ShellCommands


@dataclass(frozen=True)
class Environment:
    """The user environment services are deployed into.

    Attributes:
        id: Short environment id
        long_id: Environment UUID
        project_id: Short project id
        project_long_id: Project UUID
        owner_id: Owner id
        organization_id: Short organization id
        organization_long_id: Organization UUID
        custom_namespace: Namespace to use instead of ``<project_id>-<id>``
    """

    id: str
    long_id: str
    project_id: str
    project_long_id: str
    owner_id: str
    organization_id: str
    organization_long_id: str
    custom_namespace: str | None = None

    @property
    def namespace(self) -> str:
        return self.custom_namespace or f"{self.project_id}-{self.id}"


@dataclass(frozen=True)
class Kubernetes:
    """Cluster accessor: identity, location, kubeconfig and credentials.

    Attributes:
        id: Cluster id
        name: Cluster name
        region: Cloud region
        zone: Cloud zone (may be empty)
        kubeconfig_path: Kubeconfig file for this cluster
        credentials: Cloud-credential environment for every command
    """

    id: str
    name: str
    region: str
    zone: str = ""
    kubeconfig_path: Path | None = None
    credentials: Mapping[str, str] = field(default_factory=dict)

    def get_kubeconfig_file_path(self, event_details: EventDetails) -> Path:
        """Resolve the kubeconfig file.

        Raises:
            KubeconfigError: If no kubeconfig is configured or the file is missing
        """
        if self.kubeconfig_path is None or not self.kubeconfig_path.is_file():
            raise KubeconfigError(event_details, self.kubeconfig_path)
        return self.kubeconfig_path


@dataclass(frozen=True)
class DeploymentTarget:
    """Read-only bundle passed to every deployer operation.

    Attributes:
        kubernetes: Cluster accessor
        environment: Target environment
        kube: Cluster client handle used for status queries
        commands: Helm, terraform and kubectl bound to the cluster
        constants: Timeouts, retry budgets and naming rules
    """

    kubernetes: Kubernetes
    environment: Environment
    kube: KubernetesController
    commands: ShellCommands
    constants: EngineConstants = DEFAULT_CONSTANTS

    @property
    def namespace(self) -> str:
        return self.environment.namespace

    @classmethod
    def build(
        cls,
        kubernetes: Kubernetes,
        environment: Environment,
        workspace_root: Path,
        constants: EngineConstants = DEFAULT_CONSTANTS,
    ) -> DeploymentTarget:
        """Create the client handles once for an invocation.

        Args:
            kubernetes: Cluster accessor
            environment: Target environment
            workspace_root: Default working directory for commands
            constants: Timeouts, retry budgets and naming rules
        """
        return cls(
            kubernetes=kubernetes,
            environment=environment,
            kube=Kr8sController(kubeconfig=kubernetes.kubeconfig_path),
            commands=ShellCommands(
                workspace_root,
                kubeconfig=kubernetes.kubeconfig_path,
                envs=kubernetes.credentials,
            ),
            constants=constants,
        )
