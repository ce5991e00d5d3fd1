"""Provisioner deployer.

Managed resources (managed databases) are created and destroyed through
the provisioner pipeline. An external-name service gives in-cluster
consumers a stable name for the resource. Services that are not managed
are released as charts instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from deploy_engine.constants import DEFAULT_CONSTANTS, EngineConstants
from deploy_engine.deployers.release import (
    delete_pending_pods,
    ensure_namespace,
    helm_uninstall_release,
    release_chart,
    render_into_workspace,
    wait_for_pods_ready,
)
from deploy_engine.errors import (
    SecretDeletionError,
    TerraformDestroyError,
    TerraformPipelineError,
)
from deploy_engine.events.details import EventDetails
from deploy_engine.events.logger import EngineLogger
from deploy_engine.models.capabilities import Provisionable, ServiceLike
from deploy_engine.target import DeploymentTarget


def get_tfstate_suffix(service: ServiceLike) -> str:
    return service.id


def get_tfstate_name(
    service: ServiceLike, constants: EngineConstants = DEFAULT_CONSTANTS
) -> str:
    """Name of the secret holding the remote state.

    The provisioner's kubernetes backend names it
    ``tfstate-<workspace>-<secret suffix>`` and we always use the
    ``default`` workspace.
    """
    return f"{constants.TFSTATE_SECRET_PREFIX}{get_tfstate_suffix(service)}"


def _render_provisioner_templates(
    target: DeploymentTarget,
    service: Provisionable,
    workspace_dir: Path,
    context: dict[str, Any],
    event_details: EventDetails,
) -> None:
    render_into_workspace(
        service.terraform_common_resource_dir, workspace_dir, context, event_details
    )
    render_into_workspace(
        service.terraform_resource_dir, workspace_dir, context, event_details
    )
    render_into_workspace(
        service.helm_chart_external_name_service_dir,
        workspace_dir / target.constants.EXTERNAL_NAME_SERVICE_DIR,
        context,
        event_details,
    )


def delete_terraform_tfstate_secret(
    target: DeploymentTarget,
    secret_name: str,
    event_details: EventDetails,
) -> None:
    """Delete the remote-state secret.

    Raises:
        SecretDeletionError: If the secret cannot be deleted
    """
    result = target.commands.kubectl.delete_secret(target.namespace, secret_name)
    if not result.success:
        raise SecretDeletionError(
            event_details,
            secret_name,
            target.namespace,
            result.to_error(f"Cannot delete secret `{secret_name}`"),
        )


def deploy_stateful_service(
    target: DeploymentTarget,
    service: Provisionable,
    event_details: EventDetails,
    logger: EngineLogger,
) -> None:
    """Deploy a stateful service.

    Managed services: render the provisioner modules and the external-name
    service, then run init, validate, plan and apply (no apply on dry run).
    Other services: render the chart and its values overlay and release it
    like a stateless service.

    Raises:
        EngineError: The classified failure of the first failing step
    """
    workspace_dir = service.workspace_directory()
    context = service.template_context(target)

    if service.is_managed_service:
        logger.info(
            event_details,
            f"Deploying managed {service.service_type.name} `{service.name_with_id()}`",
        )
        _render_provisioner_templates(
            target, service, workspace_dir, context, event_details
        )

        result = target.commands.terraform.init_validate_plan_apply(
            workspace_dir, service.context.dry_run_deploy
        )
        if not result.success:
            raise TerraformPipelineError(
                event_details, result.to_error("Provisioning pipeline failed")
            )
        return

    logger.info(
        event_details,
        f"Deploying containerized {service.service_type.name} "
        f"`{service.name_with_id()}` on Kubernetes cluster",
    )
    render_into_workspace(service.helm_chart_dir, workspace_dir, context, event_details)
    if service.helm_chart_values_dir is not None:
        # Our values overwrite the chart defaults
        render_into_workspace(
            service.helm_chart_values_dir, workspace_dir, context, event_details
        )

    target.kubernetes.get_kubeconfig_file_path(event_details)
    ensure_namespace(target, service.context, event_details)
    release_chart(target, service, workspace_dir, event_details)
    delete_pending_pods(target, service.selector or "", event_details)
    wait_for_pods_ready(target, service, event_details)


def delete_stateful_service(
    target: DeploymentTarget,
    service: Provisionable,
    event_details: EventDetails,
    logger: EngineLogger,
) -> None:
    """Delete a stateful service.

    Managed services: re-render the modules, then run init, validate and
    destroy. On success the remote-state secret is removed on a best-effort
    basis. Other services: uninstall the chart release.

    Raises:
        TerraformDestroyError: If the destroy pipeline fails
        HelmError: If the chart release cannot be uninstalled
    """
    if not service.is_managed_service:
        helm_uninstall_release(target, service.helm_release_name, event_details)
        return

    workspace_dir = service.workspace_directory()
    context = service.template_context(target)
    _render_provisioner_templates(
        target, service, workspace_dir, context, event_details
    )
    # The destroy plan also needs the external-name service at the module root
    render_into_workspace(
        service.helm_chart_external_name_service_dir,
        workspace_dir,
        context,
        event_details,
    )

    result = target.commands.terraform.init_validate_destroy(workspace_dir, True)
    if not result.success:
        error = TerraformDestroyError(
            event_details, result.to_error("Provisioning destroy pipeline failed")
        )
        logger.error(error)
        raise error

    logger.info(event_details, "Deleting secret containing tfstates")
    try:
        delete_terraform_tfstate_secret(
            target, get_tfstate_name(service, target.constants), event_details
        )
    except SecretDeletionError as e:
        logger.error(e, "Remote state secret was not deleted")


def stateful_service_error(
    target: DeploymentTarget,
    service: Provisionable,
    event_details: EventDetails,
    logger: EngineLogger,
) -> None:
    """Recovery hook after a failed provisioning action.

    The provisioner's own state locking is the only consistency guarantee,
    so nothing is compensated here.
    """
    logger.info(
        event_details,
        f"No automatic recovery for {service.service_type.name.lower()} "
        f"`{service.name_with_id()}`; the next run resumes from the remote state",
    )
