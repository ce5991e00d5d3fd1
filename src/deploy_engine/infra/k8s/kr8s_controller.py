"""Cluster queries and mutations through the kr8s async client.

``DeploymentTarget.kube`` is a ``Kr8sController``; the application progress
reporter polls pods, services and claims through it. Mutations during a
deployment go through the kubectl-backed ``target.commands.kubectl``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import kr8s
from kr8s.asyncio.objects import (
    Deployment,
    Event,
    Namespace,
    PersistentVolumeClaim,
    Pod,
    Secret,
    Service,
    StatefulSet,
)

from deploy_engine.errors import CommandError

from .controller import (
    CommandResult,
    EventInfo,
    KubernetesController,
    PodInfo,
    PvcInfo,
    ScalingKind,
    ServiceInfo,
)
from .parsing import parse_event, parse_pod, parse_pvc, parse_service

HTTP_CONFLICT = 409


def _failed(error: Exception | str) -> CommandResult:
    return CommandResult(success=False, stderr=str(error), returncode=1)


class Kr8sController(KubernetesController):
    """``KubernetesController`` backed by kr8s.

    A fresh client is opened on every call: kr8s binds its client to the
    running event loop and ``run_sync`` starts a new loop each time.
    """

    def __init__(self, kubeconfig: Path | None = None) -> None:
        self.kubeconfig = kubeconfig

    async def _api(self) -> Any:
        if self.kubeconfig is None:
            return await kr8s.asyncio.api()
        return await kr8s.asyncio.api(kubeconfig=str(self.kubeconfig))

    async def create_namespace(
        self,
        namespace: str,
        labels: dict[str, str] | None = None,
    ) -> CommandResult:
        manifest = {
            "apiVersion": "v1",
            "kind": "Namespace",
            "metadata": {"name": namespace, "labels": labels or {}},
        }
        try:
            api = await self._api()
            try:
                await Namespace(manifest, api=api).create()
            except kr8s.ServerError as e:
                if e.response is None or e.response.status_code != HTTP_CONFLICT:
                    raise
            else:
                return CommandResult(
                    success=True, stdout=f"namespace/{namespace} created"
                )

            if labels:
                current = await Namespace.get(namespace, api=api)
                await current.label(labels)
            return CommandResult(success=True, stdout=f"namespace/{namespace} exists")
        except Exception as e:
            return _failed(e)

    # Pods

    async def get_pods(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PodInfo]:
        try:
            api = await self._api()
            pods = Pod.list(
                namespace=namespace, label_selector=label_selector or "", api=api
            )
            return [parse_pod(pod.raw) async for pod in pods]
        except Exception as e:
            raise CommandError("Cannot list pods", full_details=str(e)) from e

    async def delete_pod(
        self,
        namespace: str,
        name: str,
        *,
        force: bool = True,
    ) -> CommandResult:
        try:
            api = await self._api()
            pod = await Pod.get(name, namespace=namespace, api=api)
            await (pod.delete(grace_period=0) if force else pod.delete())
        except kr8s.NotFoundError:
            return _failed(f'pod "{name}" not found')
        except Exception as e:
            return _failed(e)
        return CommandResult(success=True, stdout=f'pod "{name}" deleted')

    async def check_pods_ready(self, namespace: str, label_selector: str) -> bool:
        return any(pod.ready for pod in await self.get_pods(namespace, label_selector))

    async def get_pod_logs(
        self,
        namespace: str,
        label_selector: str,
        *,
        tail: int = 100,
    ) -> list[str]:
        """Last ``tail`` lines of each matching pod, prefixed with its name."""
        lines: list[str] = []
        try:
            api = await self._api()
            async for pod in Pod.list(
                namespace=namespace, label_selector=label_selector, api=api
            ):
                lines.extend(
                    [f"[{pod.name}] {line}" async for line in pod.logs(tail_lines=tail)]
                )
        except Exception as e:
            raise CommandError(
                f"Cannot get logs for `{label_selector}`", full_details=str(e)
            ) from e
        return lines

    # Workloads and secrets

    async def scale_replicas(
        self,
        namespace: str,
        label_selector: str,
        kind: ScalingKind,
        replicas: int,
    ) -> CommandResult:
        match kind:
            case ScalingKind.DEPLOYMENT:
                resource = Deployment
            case ScalingKind.STATEFULSET:
                resource = StatefulSet
        names: list[str] = []
        try:
            api = await self._api()
            async for workload in resource.list(
                namespace=namespace, label_selector=label_selector, api=api
            ):
                await workload.scale(replicas)
                names.append(workload.name)
        except Exception as e:
            return _failed(e)

        if not names:
            return CommandResult(success=True, stdout="No workloads found")
        return CommandResult(
            success=True, stdout=f"Scaled {', '.join(names)} to {replicas}"
        )

    async def delete_secret(self, namespace: str, name: str) -> CommandResult:
        try:
            api = await self._api()
            secret = await Secret.get(name, namespace=namespace, api=api)
            await secret.delete()
        except kr8s.NotFoundError:
            return _failed(f'secret "{name}" not found')
        except Exception as e:
            return _failed(e)
        return CommandResult(success=True, stdout=f'secret "{name}" deleted')

    # Status

    async def get_events(self, namespace: str) -> list[EventInfo]:
        try:
            api = await self._api()
            events = Event.list(namespace=namespace, api=api)
            return [parse_event(event.raw) async for event in events]
        except Exception as e:
            raise CommandError("Cannot list events", full_details=str(e)) from e

    async def get_services(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[ServiceInfo]:
        try:
            api = await self._api()
            services = Service.list(
                namespace=namespace, label_selector=label_selector or "", api=api
            )
            return [parse_service(svc.raw) async for svc in services]
        except Exception as e:
            raise CommandError("Cannot list services", full_details=str(e)) from e

    async def get_pvcs(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PvcInfo]:
        try:
            api = await self._api()
            claims = PersistentVolumeClaim.list(
                namespace=namespace, label_selector=label_selector or "", api=api
            )
            return [parse_pvc(claim.raw) async for claim in claims]
        except Exception as e:
            raise CommandError("Cannot list pvcs", full_details=str(e)) from e
