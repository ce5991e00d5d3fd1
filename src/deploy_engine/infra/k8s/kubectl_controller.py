"""``KubernetesController`` that shells out to the kubectl binary.

Every call exports the target's kubeconfig and cloud credentials, so the
same controller works against any cluster the provisioner can reach.
"""

from __future__ import annotations

import asyncio
import json
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Any

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


def _with_selector(args: list[str], label_selector: str | None) -> list[str]:
    return [*args, "-l", label_selector] if label_selector else args


class KubectlController(KubernetesController):
    """Runs kubectl in a worker thread so callers can await it."""

    def __init__(
        self,
        kubeconfig: Path | None = None,
        envs: Mapping[str, str] | None = None,
    ) -> None:
        self.kubeconfig = kubeconfig
        self.envs = dict(envs or {})

    def _environment(self) -> dict[str, str]:
        env = {**os.environ, **self.envs}
        if self.kubeconfig is not None:
            env["KUBECONFIG"] = str(self.kubeconfig)
        return env

    async def _run_kubectl(self, args: list[str]) -> CommandResult:
        """Run ``kubectl <args>`` off the event loop."""
        try:
            completed = await asyncio.to_thread(
                subprocess.run,
                ["kubectl", *args],
                capture_output=True,
                text=True,
                env=self._environment(),
            )
        except OSError as e:
            return CommandResult.not_run(e)
        return CommandResult(
            success=completed.returncode == 0,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )

    async def _list(
        self, resource: str, namespace: str, label_selector: str | None = None
    ) -> list[dict[str, Any]]:
        """Raw ``items`` of ``kubectl get <resource> -o json``.

        Raises:
            CommandError: If kubectl fails or prints something other than JSON
        """
        args = _with_selector(["get", resource, "-n", namespace], label_selector)
        result = await self._run_kubectl([*args, "-o", "json"])
        what = "pvcs" if resource == "pvc" else resource
        result.raise_for_status(f"Cannot list {what}")
        try:
            document = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise CommandError(
                f"Cannot parse {what} returned by kubectl", full_details=str(e)
            ) from e
        return list(document.get("items", []))

    async def create_namespace(
        self,
        namespace: str,
        labels: dict[str, str] | None = None,
    ) -> CommandResult:
        created = await self._run_kubectl(["create", "namespace", namespace])
        if not created.success and "AlreadyExists" not in created.stderr:
            return created
        if not labels:
            return CommandResult(success=True, stdout=created.stdout)

        pairs = [f"{key}={value}" for key, value in labels.items()]
        return await self._run_kubectl(
            ["label", "namespace", namespace, *pairs, "--overwrite"]
        )

    async def get_pods(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PodInfo]:
        items = await self._list("pods", namespace, label_selector)
        return [parse_pod(raw) for raw in items]

    async def delete_pod(
        self,
        namespace: str,
        name: str,
        *,
        force: bool = True,
    ) -> CommandResult:
        extra = ["--force", "--grace-period=0"] if force else []
        return await self._run_kubectl(["delete", "pod", name, "-n", namespace, *extra])

    async def check_pods_ready(self, namespace: str, label_selector: str) -> bool:
        return any(pod.ready for pod in await self.get_pods(namespace, label_selector))

    async def get_pod_logs(
        self,
        namespace: str,
        label_selector: str,
        *,
        tail: int = 100,
    ) -> list[str]:
        """Prefixed log lines of all containers behind ``label_selector``."""
        result = await self._run_kubectl(
            [
                "logs",
                "-n",
                namespace,
                "-l",
                label_selector,
                "--all-containers=true",
                "--prefix",
                f"--tail={tail}",
            ]
        )
        result.raise_for_status(f"Cannot get logs for `{label_selector}`")
        return list(filter(None, result.stdout.splitlines()))

    async def scale_replicas(
        self,
        namespace: str,
        label_selector: str,
        kind: ScalingKind,
        replicas: int,
    ) -> CommandResult:
        return await self._run_kubectl(
            [
                "scale",
                kind.value,
                "-n",
                namespace,
                "-l",
                label_selector,
                f"--replicas={replicas}",
            ]
        )

    async def delete_secret(self, namespace: str, name: str) -> CommandResult:
        return await self._run_kubectl(["delete", "secret", name, "-n", namespace])

    async def get_events(self, namespace: str) -> list[EventInfo]:
        return [parse_event(raw) for raw in await self._list("events", namespace)]

    async def get_services(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[ServiceInfo]:
        items = await self._list("services", namespace, label_selector)
        return [parse_service(raw) for raw in items]

    async def get_pvcs(
        self,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[PvcInfo]:
        items = await self._list("pvc", namespace, label_selector)
        return [parse_pvc(raw) for raw in items]
