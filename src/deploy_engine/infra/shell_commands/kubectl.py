"""Kubectl command abstractions.

This is a sync wrapper around an async ``KubernetesController`` (by
default a ``KubectlController`` bound to the target's kubeconfig and
credential environment). All methods delegate using run_sync().
"""

from __future__ import annotations

from deploy_engine.infra.k8s import KubernetesController, run_sync
from deploy_engine.infra.k8s.controller import (
    CommandResult,
    EventInfo,
    PodInfo,
    ScalingKind,
)


class KubectlCommands:
    """Kubectl-related commands used by the deployers.

    Provides operations for:
    - Namespace creation
    - Pod listing, readiness and deletion
    - Workload scaling
    - Secret deletion
    - Logs and events for diagnostics
    """

    def __init__(self, controller: KubernetesController) -> None:
        """Initialize kubectl commands.

        Args:
            controller: Async controller performing the operations
        """
        self._controller = controller

    # =========================================================================
    # Namespace Management
    # =========================================================================

    def create_namespace(
        self, namespace: str, labels: dict[str, str] | None = None
    ) -> CommandResult:
        """Create a namespace. An existing namespace is not an error."""
        return run_sync(self._controller.create_namespace(namespace, labels))

    # =========================================================================
    # Pod Operations
    # =========================================================================

    def get_pods(
        self, namespace: str, label_selector: str | None = None
    ) -> list[PodInfo]:
        """List pods matching a selector."""
        return run_sync(self._controller.get_pods(namespace, label_selector))

    def delete_pod(self, namespace: str, name: str) -> CommandResult:
        """Force-delete a pod."""
        return run_sync(self._controller.delete_pod(namespace, name, force=True))

    def check_pods_ready(self, namespace: str, label_selector: str) -> bool:
        """Check whether a pod matching the selector is ready."""
        return run_sync(self._controller.check_pods_ready(namespace, label_selector))

    # =========================================================================
    # Workloads and Secrets
    # =========================================================================

    def scale_replicas(
        self,
        namespace: str,
        label_selector: str,
        kind: ScalingKind,
        replicas: int,
    ) -> CommandResult:
        """Scale deployments or statefulsets matching a selector."""
        return run_sync(
            self._controller.scale_replicas(namespace, label_selector, kind, replicas)
        )

    def delete_secret(self, namespace: str, name: str) -> CommandResult:
        """Delete a secret."""
        return run_sync(self._controller.delete_secret(namespace, name))

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def get_logs(
        self, namespace: str, label_selector: str, *, tail: int = 100
    ) -> list[str]:
        """Get container logs for a selector."""
        return run_sync(
            self._controller.get_pod_logs(namespace, label_selector, tail=tail)
        )

    def get_events(self, namespace: str) -> list[EventInfo]:
        """Get namespace events."""
        return run_sync(self._controller.get_events(namespace))
