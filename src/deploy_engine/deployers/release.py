"""Chart-release deployer.

Deploys, deletes and scales containerized services (applications,
routers, self-hosted databases) through the chart manager. Recovery from
a failed upgrade is left to the chart manager's atomic rollback.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tenacity

from deploy_engine.errors import (
    CommandError,
    HelmError,
    KubernetesServiceIssue,
    NamespaceCreationError,
    ScaleReplicasError,
    ServiceFailedToStartError,
    TemplateCopyError,
)
from deploy_engine.events.details import EnvironmentStep, EventDetails
from deploy_engine.events.logger import EngineLogger
from deploy_engine.infra.k8s.controller import PodPhase, ScalingKind
from deploy_engine.infra.shell_commands import ChartInfo
from deploy_engine.infra.templates import render_directory
from deploy_engine.models.capabilities import Provisionable, Releasable, ServiceLike
from deploy_engine.models.context import ExecutionContext
from deploy_engine.target import DeploymentTarget


class PodsNotReady(Exception):
    """No pod matching the selector is ready yet."""


# =============================================================================
# Shared Steps
# =============================================================================


def render_into_workspace(
    source_dir: Path,
    dest_dir: Path,
    context: Mapping[str, Any],
    event_details: EventDetails,
) -> None:
    """Render a template directory, classifying failures.

    Raises:
        TemplateCopyError: If the directory cannot be materialized
    """
    try:
        render_directory(source_dir, dest_dir, context)
    except CommandError as e:
        raise TemplateCopyError(event_details, source_dir, dest_dir, e) from e


def namespace_labels(
    context: ExecutionContext, ttl_label: str
) -> dict[str, str] | None:
    """Labels to set on the namespace: a TTL when resources expire."""
    if context.resource_expiration_in_seconds is None:
        return None
    return {ttl_label: str(context.resource_expiration_in_seconds)}


def ensure_namespace(
    target: DeploymentTarget,
    context: ExecutionContext,
    event_details: EventDetails,
) -> None:
    """Create the target namespace if needed.

    Raises:
        NamespaceCreationError: If the namespace cannot be created
    """
    labels = namespace_labels(context, target.constants.NAMESPACE_TTL_LABEL)
    result = target.commands.kubectl.create_namespace(target.namespace, labels)
    if not result.success:
        raise NamespaceCreationError(
            event_details,
            target.namespace,
            result.to_error(f"Cannot create namespace `{target.namespace}`"),
        )


def delete_pending_pods(
    target: DeploymentTarget,
    selector: str,
    event_details: EventDetails,
) -> list[str]:
    """Force-delete Pending pods left by a previous rollout.

    Returns:
        Names of the deleted pods

    Raises:
        KubernetesServiceIssue: If pods cannot be listed or deleted
    """
    kubectl = target.commands.kubectl
    try:
        pods = kubectl.get_pods(target.namespace, selector)
    except CommandError as e:
        raise KubernetesServiceIssue(event_details, e) from e

    deleted = []
    for pod in pods:
        if pod.phase is not PodPhase.PENDING:
            continue
        result = kubectl.delete_pod(pod.namespace or target.namespace, pod.name)
        if not result.success:
            raise KubernetesServiceIssue(
                event_details,
                result.to_error(f"Cannot delete pending pod `{pod.name}`"),
            )
        deleted.append(pod.name)
    return deleted


def wait_for_pods_ready(
    target: DeploymentTarget,
    service: ServiceLike,
    event_details: EventDetails,
) -> None:
    """Poll until a pod matching the service's selector is ready.

    Raises:
        ServiceFailedToStartError: When the retry budget is exhausted,
            carrying the last check error if the last check failed
    """
    selector = service.selector or ""
    kubectl = target.commands.kubectl

    def _check_ready() -> None:
        if not kubectl.check_pods_ready(target.namespace, selector):
            raise PodsNotReady(selector)

    retryer = tenacity.Retrying(
        retry=tenacity.retry_if_exception_type((CommandError, PodsNotReady)),
        stop=tenacity.stop_after_attempt(target.constants.POD_READY_MAX_ATTEMPTS),
        wait=tenacity.wait_fixed(target.constants.POD_READY_DELAY_SECONDS),
        reraise=True,
    )
    try:
        retryer(_check_ready)
    except (CommandError, PodsNotReady) as e:
        raise ServiceFailedToStartError(
            event_details,
            service.name_with_id(),
            service.service_type.name,
            selector,
            target.namespace,
            e if isinstance(e, CommandError) else None,
        ) from e


def release_chart(
    target: DeploymentTarget,
    service: Releasable,
    workspace_dir: Path,
    event_details: EventDetails,
) -> None:
    """Run the chart upgrade for a rendered workspace.

    Raises:
        HelmError: If the upgrade fails (the release is rolled back)
    """
    value_files = []
    if service.service_type.is_database:
        value_files.append(workspace_dir / target.constants.DATABASE_VALUES_FILE)

    chart = ChartInfo(
        name=service.helm_release_name,
        path=workspace_dir,
        namespace=target.namespace,
        timeout_seconds=target.constants.HELM_TIMEOUT_SECONDS,
        value_files=value_files,
        atomic=target.constants.HELM_ATOMIC,
        selector=service.selector,
    )
    result = target.commands.helm.upgrade(chart)
    if not result.success:
        raise HelmError(
            event_details,
            chart.name,
            result.to_error(f"helm upgrade of `{chart.name}` failed"),
        )


# =============================================================================
# Deploy
# =============================================================================


def deploy_stateless_service(
    target: DeploymentTarget,
    service: Releasable,
    logger: EngineLogger,
) -> None:
    """Deploy a containerized service through its chart.

    Steps, each aborting the rest on failure: render the chart (plus the
    database values overlay for databases), ensure the namespace, upgrade
    the release, sweep Pending pods, wait for readiness.

    Raises:
        EngineError: The classified failure of the first failing step
    """
    event_details = service.event_details(EnvironmentStep.DEPLOY)
    workspace_dir = service.workspace_directory()
    context = service.template_context(target)

    render_into_workspace(service.helm_chart_dir, workspace_dir, context, event_details)
    if service.service_type.is_database and service.helm_chart_values_dir is not None:
        render_into_workspace(
            service.helm_chart_values_dir, workspace_dir, context, event_details
        )

    target.kubernetes.get_kubeconfig_file_path(event_details)
    ensure_namespace(target, service.context, event_details)

    logger.info(
        event_details,
        f"Releasing chart `{service.helm_release_name}` for "
        f"{service.service_type.name.lower()} `{service.name_with_id()}`",
    )
    release_chart(target, service, workspace_dir, event_details)

    deleted = delete_pending_pods(target, service.selector or "", event_details)
    if deleted:
        logger.debug(event_details, f"Deleted pending pods: {', '.join(deleted)}")

    wait_for_pods_ready(target, service, event_details)


def deploy_user_stateless_service(
    target: DeploymentTarget,
    service: Releasable,
    logger: EngineLogger,
) -> None:
    """Deploy a service created by the user (an application).

    Identical to ``deploy_stateless_service``; kept separate so callers
    can tell user workloads from engine-managed ones.
    """
    deploy_stateless_service(target, service, logger)


def deploy_stateless_service_error(
    target: DeploymentTarget,
    service: Releasable,
    logger: EngineLogger,
) -> None:
    """Recovery hook after a failed deploy.

    Nothing to do: the release is upgraded with ``--atomic``, so the
    chart manager already rolled back to the last good revision.
    """
    logger.debug(
        service.event_details(EnvironmentStep.DEPLOY),
        f"Release `{service.helm_release_name}` was rolled back by the chart manager",
    )


# =============================================================================
# Delete
# =============================================================================


def helm_uninstall_release(
    target: DeploymentTarget,
    release_name: str,
    event_details: EventDetails,
) -> None:
    """Uninstall a chart release.

    Raises:
        HelmError: If the uninstall fails, whatever the reason
    """
    result = target.commands.helm.uninstall(release_name, target.namespace)
    if not result.success:
        raise HelmError(
            event_details,
            release_name,
            result.to_error(f"helm uninstall of `{release_name}` failed"),
        )


def delete_stateless_service(
    target: DeploymentTarget,
    service: Releasable,
    event_details: EventDetails,
) -> None:
    """Delete a containerized service by uninstalling its release."""
    helm_uninstall_release(target, service.helm_release_name, event_details)


# =============================================================================
# Scale Down
# =============================================================================


def _scale(
    target: DeploymentTarget,
    selector: str,
    kind: ScalingKind,
    replicas: int,
    event_details: EventDetails,
) -> None:
    result = target.commands.kubectl.scale_replicas(
        target.namespace, selector, kind, replicas
    )
    if not result.success:
        raise ScaleReplicasError(
            event_details,
            selector,
            target.namespace,
            replicas,
            result.to_error(f"Cannot scale `{selector}`"),
        )


def scale_down_application(
    target: DeploymentTarget,
    service: ServiceLike,
    replicas: int,
    kind: ScalingKind,
) -> None:
    """Scale an application's workloads (Deployment or StatefulSet).

    Raises:
        ScaleReplicasError: If scaling fails
    """
    event_details = service.event_details(EnvironmentStep.SCALE_DOWN)
    target.kubernetes.get_kubeconfig_file_path(event_details)
    _scale(target, service.selector or "", kind, replicas, event_details)


def scale_down_database(
    target: DeploymentTarget,
    service: Provisionable,
    replicas: int,
) -> None:
    """Scale a self-hosted database's StatefulSet. Managed databases are left as is.

    Raises:
        ScaleReplicasError: If scaling fails
    """
    if service.is_managed_service:
        return

    event_details = service.event_details(EnvironmentStep.SCALE_DOWN)
    target.kubernetes.get_kubeconfig_file_path(event_details)
    _scale(
        target,
        f"databaseId={service.id}",
        ScalingKind.STATEFULSET,
        replicas,
        event_details,
    )
