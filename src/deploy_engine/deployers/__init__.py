"""Deployment strategies: chart releases and provisioner pipelines."""

from .diagnostics import debug_logs, get_stateless_resource_information_for_user
from .provisioner import (
    delete_stateful_service,
    delete_terraform_tfstate_secret,
    deploy_stateful_service,
    get_tfstate_name,
    get_tfstate_suffix,
    stateful_service_error,
)
from .release import (
    delete_pending_pods,
    delete_stateless_service,
    deploy_stateless_service,
    deploy_stateless_service_error,
    deploy_user_stateless_service,
    helm_uninstall_release,
    scale_down_application,
    scale_down_database,
    wait_for_pods_ready,
)

__all__ = [
    "debug_logs",
    "delete_pending_pods",
    "delete_stateful_service",
    "delete_stateless_service",
    "delete_terraform_tfstate_secret",
    "deploy_stateful_service",
    "deploy_stateless_service",
    "deploy_stateless_service_error",
    "deploy_user_stateless_service",
    "get_stateless_resource_information_for_user",
    "get_tfstate_name",
    "get_tfstate_suffix",
    "helm_uninstall_release",
    "scale_down_application",
    "scale_down_database",
    "stateful_service_error",
    "wait_for_pods_ready",
]
