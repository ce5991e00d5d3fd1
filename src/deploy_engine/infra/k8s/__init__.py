"""Cluster access for the deployment engine.

``KubernetesController`` is the async contract the services and the
progress reporter use. ``Kr8sController`` talks to the API server
directly and ``KubectlController`` shells out to kubectl with the
target's kubeconfig. ``run_sync`` calls either from blocking code.
"""

from .controller import (
    CommandResult,
    ContainerLastState,
    EventInfo,
    KubernetesController,
    PodCondition,
    PodInfo,
    PodPhase,
    PvcInfo,
    ScalingKind,
    ServiceInfo,
)
from .deployment_info import (
    AppDeploymentInfo,
    format_app_deployment_info,
    get_app_deployment_info,
)
from .kr8s_controller import Kr8sController
from .kubectl_controller import KubectlController
from .utils import run_sync

__all__ = [
    # Controller classes
    "KubernetesController",
    "KubectlController",
    "Kr8sController",
    # Data classes
    "CommandResult",
    "ContainerLastState",
    "EventInfo",
    "PodCondition",
    "PodInfo",
    "PodPhase",
    "PvcInfo",
    "ScalingKind",
    "ServiceInfo",
    # Application state
    "AppDeploymentInfo",
    "format_app_deployment_info",
    "get_app_deployment_info",
    # Utilities
    "run_sync",
]
