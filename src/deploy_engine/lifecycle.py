"""Lifecycle dispatch of a service's declared action.

Each dispatch is a total ``match`` over ``Action``: adding a variant
without handling it here is reported by the type checker through
``assert_never``.
"""

from __future__ import annotations

from typing import assert_never

from deploy_engine.errors import EngineError
from deploy_engine.events.logger import EngineLogger
from deploy_engine.models.action import Action
from deploy_engine.models.capabilities import LifecycleService
from deploy_engine.progress import step_for_action
from deploy_engine.target import DeploymentTarget


def exec_check_action(service: LifecycleService, logger: EngineLogger) -> None:
    """Validate the preconditions of the declared action."""
    match service.action:
        case Action.CREATE:
            service.on_create_check(logger)
        case Action.PAUSE:
            service.on_pause_check(logger)
        case Action.DELETE:
            service.on_delete_check(logger)
        case Action.NOTHING:
            pass
        case _ as unreachable:
            assert_never(unreachable)


def exec_action(
    service: LifecycleService, target: DeploymentTarget, logger: EngineLogger
) -> None:
    """Run the handler of the declared action. ``NOTHING`` is a no-op."""
    match service.action:
        case Action.CREATE:
            service.on_create(target, logger)
        case Action.PAUSE:
            service.on_pause(target, logger)
        case Action.DELETE:
            service.on_delete(target, logger)
        case Action.NOTHING:
            pass
        case _ as unreachable:
            assert_never(unreachable)


def exec_error_action(
    service: LifecycleService, target: DeploymentTarget, logger: EngineLogger
) -> None:
    """Run the recovery hook of the declared action."""
    match service.action:
        case Action.CREATE:
            service.on_create_error(target, logger)
        case Action.PAUSE:
            service.on_pause_error(target, logger)
        case Action.DELETE:
            service.on_delete_error(target, logger)
        case Action.NOTHING:
            pass
        case _ as unreachable:
            assert_never(unreachable)


class LifecycleOrchestrator:
    """Drives one service through its declared action.

    Example:
        >>> orchestrator = LifecycleOrchestrator(EngineLogger())
        >>> orchestrator.execute(database, target)
    """

    def __init__(self, logger: EngineLogger) -> None:
        self._logger = logger

    def execute(self, service: LifecycleService, target: DeploymentTarget) -> None:
        """Check, then run, the service's declared action.

        On failure the action's recovery hook runs before the error is
        re-raised unchanged. A failing recovery hook is logged and never
        replaces the original error.

        Raises:
            EngineError: The classified failure of the check or the action
        """
        event_details = service.event_details(step_for_action(service.action))
        self._logger.debug(
            event_details,
            f"Executing action `{service.action.value}` on "
            f"{service.service_type.name} `{service.name_with_id()}`",
        )

        exec_check_action(service, self._logger)
        try:
            exec_action(service, target, self._logger)
        except EngineError:
            try:
                exec_error_action(service, target, self._logger)
            except EngineError as hook_error:
                self._logger.error(
                    hook_error,
                    f"Recovery of {service.service_type.name} "
                    f"`{service.name_with_id()}` failed",
                )
            raise
