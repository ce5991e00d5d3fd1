"""Diagnostics gathered for users when a service fails.

Lines are collected from container logs, unmet pod conditions, container
termination states and non-normal namespace events.
"""

from __future__ import annotations

from deploy_engine.errors import CommandError, DiagnosticsError, EngineError
from deploy_engine.events.details import EventDetails
from deploy_engine.events.logger import EngineLogger
from deploy_engine.models.capabilities import ServiceLike
from deploy_engine.target import DeploymentTarget


def get_stateless_resource_information_for_user(
    target: DeploymentTarget,
    service: ServiceLike,
    event_details: EventDetails,
) -> list[str]:
    """Explain, line by line, why a service does not start.

    Raises:
        DiagnosticsError: If logs, pods or events cannot be retrieved
    """
    selector = service.selector or ""
    namespace = target.namespace
    kubectl = target.commands.kubectl
    lines: list[str] = []

    try:
        lines.extend(
            kubectl.get_logs(namespace, selector, tail=target.constants.LOG_TAIL_LINES)
        )
    except CommandError as e:
        raise DiagnosticsError(event_details, f"logs for `{selector}`", e) from e

    try:
        pods = kubectl.get_pods(namespace, selector)
    except CommandError as e:
        raise DiagnosticsError(event_details, f"pods for `{selector}`", e) from e

    for pod in pods:
        for condition in pod.conditions:
            if condition.status.lower() == "false":
                lines.append(
                    "Condition not met to start the container: "
                    f"{condition.type} -> {condition.reason}: {condition.message or ''}"
                )
        for last_state in pod.last_states:
            if last_state.terminated_message:
                lines.append(
                    f"terminated state message: {last_state.terminated_message}"
                )
            if last_state.terminated_exit_code is not None:
                lines.append(
                    f"terminated state exit code: {last_state.terminated_exit_code}"
                )
            if last_state.waiting_message:
                lines.append(f"waiting state message: {last_state.waiting_message}")

    try:
        events = kubectl.get_events(namespace)
    except CommandError as e:
        raise DiagnosticsError(event_details, f"events in `{namespace}`", e) from e

    for event in events:
        if event.type.lower() != "normal" and event.message:
            lines.append(
                f"{event.last_timestamp} {event.type} {event.reason}: {event.message}"
            )

    return lines


def debug_logs(
    service: ServiceLike,
    target: DeploymentTarget,
    event_details: EventDetails,
    logger: EngineLogger,
) -> list[str]:
    """Diagnostics for a failed service, or nothing if they cannot be gathered.

    A gathering failure is logged and never replaces the original error.
    """
    try:
        return get_stateless_resource_information_for_user(
            target, service, event_details
        )
    except EngineError as e:
        logger.error(
            e,
            f"error while retrieving debug logs from {service.service_type.name} "
            f"{service.name_with_id()}",
        )
        return []
