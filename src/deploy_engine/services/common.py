"""Plumbing shared by the concrete service kinds."""

from __future__ import annotations

from collections.abc import Callable

from deploy_engine.events.logger import EngineLogger
from deploy_engine.models.action import Action
from deploy_engine.models.capabilities import Listenable
from deploy_engine.progress import send_progress_on_long_task, step_for_action
from deploy_engine.reporting import check_kubernetes_service_error
from deploy_engine.target import DeploymentTarget


def run_reported(
    service: Listenable,
    action: Action,
    action_verb: str,
    target: DeploymentTarget,
    logger: EngineLogger,
    call: Callable[[], None],
) -> None:
    """Run a cluster operation with progress ticks and error reporting.

    Args:
        service: Service the operation applies to
        action: Action in progress
        action_verb: Verb used in user-facing messages ("Deployment"...)
        target: Deployment target
        logger: Engine logger
        call: Blocking cluster operation
    """
    event_details = service.event_details(step_for_action(action))
    send_progress_on_long_task(
        service,
        action,
        target,
        logger,
        lambda: check_kubernetes_service_error(
            call, service, target, event_details, logger, action_verb, action
        ),
    )


def run_with_progress(
    service: Listenable,
    action: Action,
    target: DeploymentTarget,
    logger: EngineLogger,
    call: Callable[[], None],
) -> None:
    """Run a recovery operation with progress ticks only."""
    send_progress_on_long_task(service, action, target, logger, call)
