"""Conversion of raw Kubernetes API objects into controller data types.

Both controllers receive the same JSON documents (kubectl ``-o json`` or
kr8s ``.raw``), so the parsing lives here once.
"""

from __future__ import annotations

from typing import Any

from .controller import (
    ContainerLastState,
    EventInfo,
    PodCondition,
    PodInfo,
    PodPhase,
    PvcInfo,
    ServiceInfo,
)


def parse_pod(raw: dict[str, Any]) -> PodInfo:
    """Build a PodInfo from a pod document."""
    metadata = raw.get("metadata", {})
    status = raw.get("status", {})
    phase = PodPhase.parse(status.get("phase"))

    conditions = [
        PodCondition(
            type=c.get("type", ""),
            status=c.get("status", ""),
            reason=c.get("reason"),
            message=c.get("message"),
        )
        for c in status.get("conditions", [])
    ]
    ready = any(c.type == "Ready" and c.status.lower() == "true" for c in conditions)

    pod_status = phase.value
    restarts = 0
    last_states = []
    for cs in status.get("containerStatuses") or []:
        restarts += cs.get("restartCount", 0)
        state = cs.get("state", {})
        if "waiting" in state:
            if reason := state["waiting"].get("reason", ""):
                pod_status = reason
        elif "terminated" in state:
            if state["terminated"].get("reason", "") == "Error":
                pod_status = "Error"

        last_state = cs.get("lastState") or {}
        terminated = last_state.get("terminated")
        waiting = last_state.get("waiting")
        if terminated or waiting:
            last_states.append(
                ContainerLastState(
                    terminated_exit_code=terminated.get("exitCode")
                    if terminated
                    else None,
                    terminated_message=terminated.get("message")
                    if terminated
                    else None,
                    waiting_message=waiting.get("message") if waiting else None,
                )
            )

    return PodInfo(
        name=metadata.get("name", ""),
        namespace=metadata.get("namespace", ""),
        phase=phase,
        status=pod_status,
        restarts=restarts,
        ready=ready,
        conditions=conditions,
        last_states=last_states,
    )


def parse_event(raw: dict[str, Any]) -> EventInfo:
    """Build an EventInfo from an event document."""
    involved = raw.get("involvedObject", {})
    return EventInfo(
        type=raw.get("type", ""),
        reason=raw.get("reason", ""),
        message=raw.get("message"),
        last_timestamp=raw.get("lastTimestamp") or raw.get("eventTime") or "",
        involved_object=f"{involved.get('kind', '')}/{involved.get('name', '')}",
    )


def parse_service(raw: dict[str, Any]) -> ServiceInfo:
    """Build a ServiceInfo from a service document."""
    spec = raw.get("spec", {})
    return ServiceInfo(
        name=raw.get("metadata", {}).get("name", ""),
        type=spec.get("type", ""),
        cluster_ip=spec.get("clusterIP", ""),
    )


def parse_pvc(raw: dict[str, Any]) -> PvcInfo:
    """Build a PvcInfo from a PersistentVolumeClaim document."""
    status = raw.get("status", {})
    return PvcInfo(
        name=raw.get("metadata", {}).get("name", ""),
        status=status.get("phase", ""),
        capacity=status.get("capacity", {}).get("storage", ""),
    )
