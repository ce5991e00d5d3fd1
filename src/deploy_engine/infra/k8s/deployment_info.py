"""Live deployment state of an application.

Counts the pods, services and volumes labelled with the application's
long id. Used by the application progress reporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .controller import KubernetesController, PodInfo, PvcInfo, ServiceInfo

APP_LONG_ID_LABEL = "appLongId"


@dataclass
class AppDeploymentInfo:
    """Pods, services and volumes currently deployed for an application."""

    pods: list[PodInfo] = field(default_factory=list)
    services: list[ServiceInfo] = field(default_factory=list)
    pvcs: list[PvcInfo] = field(default_factory=list)


def app_selector(app_long_id: str) -> str:
    """Label selector matching every object of an application."""
    return f"{APP_LONG_ID_LABEL}={app_long_id}"


async def get_app_deployment_info(
    client: KubernetesController,
    app_long_id: str,
    namespace: str,
) -> AppDeploymentInfo:
    """Query the cluster for the objects of an application.

    Raises:
        CommandError: If any of the queries fails
    """
    selector = app_selector(app_long_id)
    return AppDeploymentInfo(
        pods=await client.get_pods(namespace, selector),
        services=await client.get_services(namespace, selector),
        pvcs=await client.get_pvcs(namespace, selector),
    )


def format_app_deployment_info(info: AppDeploymentInfo, app_name: str) -> list[str]:
    """Render one status line for the application and one per pod."""
    lines = [
        f"Application `{app_name}` has {len(info.pods)} pod(s), "
        f"{len(info.services)} service(s) and {len(info.pvcs)} network volume(s)"
    ]
    for pod in info.pods:
        line = f"  Pod {pod.name} is {pod.status or pod.phase.value}"
        if pod.restarts:
            line += f" ({pod.restarts} restart(s))"
        lines.append(line)
    return lines
