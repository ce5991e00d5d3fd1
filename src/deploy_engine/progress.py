"""Progress reporting around long blocking operations.

Chart upgrades and provisioning pipelines block the calling thread for
minutes. While they run, a reporter thread tells the service's listeners
(and the logger) that the operation is still in progress, once per tick.

Shutdown is relaxed: when the operation returns, the stop signal is set
and the result is returned immediately. The reporter observes the signal
within one tick; the caller never joins it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from deploy_engine.errors import CommandError
from deploy_engine.events.details import (
    EnvironmentStep,
    ProgressInfo,
    ProgressLevel,
)
from deploy_engine.events.listeners import ListenersHelper
from deploy_engine.events.logger import EngineLogger
from deploy_engine.infra.k8s import (
    format_app_deployment_info,
    get_app_deployment_info,
    run_sync,
)
from deploy_engine.models.action import Action
from deploy_engine.models.capabilities import Listenable
from deploy_engine.target import DeploymentTarget


def step_for_action(action: Action) -> EnvironmentStep:
    """Pipeline stage reported for ``action``."""
    match action:
        case Action.CREATE | Action.NOTHING:
            return EnvironmentStep.DEPLOY
        case Action.PAUSE:
            return EnvironmentStep.PAUSE
        case Action.DELETE:
            return EnvironmentStep.DELETE


def waiting_message(service: Listenable, action: Action) -> str | None:
    """Static message sent while ``action`` runs, if any."""
    name = f"{service.service_type.name} '{service.name_with_id_and_version()}'"
    match action:
        case Action.CREATE:
            return f"{name} deployment is in progress..."
        case Action.PAUSE:
            return f"{name} pause is in progress..."
        case Action.DELETE:
            return f"{name} deletion is in progress..."
        case Action.NOTHING:
            return None


def send_progress_on_long_task[R](
    service: Listenable,
    action: Action,
    target: DeploymentTarget,
    logger: EngineLogger,
    long_task: Callable[[], R],
    *,
    interval: float | None = None,
) -> R:
    """Run ``long_task`` while reporting a message derived from ``action``."""
    return send_progress_on_long_task_with_message(
        service,
        waiting_message(service, action),
        action,
        target,
        logger,
        long_task,
        interval=interval,
    )


def send_progress_on_long_task_with_message[R](
    service: Listenable,
    message: str | None,
    action: Action,
    target: DeploymentTarget,
    logger: EngineLogger,
    long_task: Callable[[], R],
    *,
    interval: float | None = None,
) -> R:
    """Run ``long_task`` while reporting ``message`` every ``interval`` seconds.

    Args:
        service: Service whose listeners receive the reports
        message: Message to report (a fallback text when None)
        action: Action in progress; selects the listener channel
        target: Deployment target (tick interval from its constants)
        logger: Engine logger receiving the same reports
        long_task: Blocking operation
        interval: Override of the tick interval, in seconds

    Returns:
        The result of ``long_task``; its exceptions propagate unchanged
    """
    tick = (
        interval if interval is not None else target.constants.PROGRESS_INTERVAL_SECONDS
    )
    text = message or target.constants.WAITING_MESSAGE_FALLBACK
    helper = ListenersHelper(service.listeners)
    event_details = service.event_details(step_for_action(action))
    scope = service.progress_scope()
    execution_id = service.context.execution_id
    stop = threading.Event()

    def _report() -> None:
        while True:
            helper.in_progress(
                action,
                ProgressInfo(scope, ProgressLevel.INFO, message, execution_id),
            )
            if action is not Action.NOTHING:
                logger.info(event_details, text)

            if stop.wait(tick):
                break

    threading.Thread(target=_report, name="task-monitor", daemon=True).start()
    try:
        return long_task()
    finally:
        stop.set()


def send_progress_for_application[R](
    app: Listenable,
    action: Action,
    target: DeploymentTarget,
    logger: EngineLogger,
    long_task: Callable[[], R],
    *,
    interval: float | None = None,
    barrier_timeout: float | None = None,
) -> R:
    """Run ``long_task`` while reporting the application's live state.

    The reporter first queries the current deployment state and reports
    it; ``long_task`` starts only once that report is done (both threads
    meet at a barrier). Then, every tick, the reporter sends the pods,
    services and volumes it finds.

    Args:
        app: Application being deployed
        action: Action in progress
        target: Deployment target (cluster client, tick interval)
        logger: Engine logger receiving the same reports
        long_task: Blocking operation
        interval: Override of the tick interval, in seconds
        barrier_timeout: Override of the maximum wait at the barrier

    Returns:
        The result of ``long_task``; its exceptions propagate unchanged
    """
    constants = target.constants
    tick = interval if interval is not None else constants.PROGRESS_INTERVAL_SECONDS
    helper = ListenersHelper(app.listeners)
    channel = action if action is not Action.NOTHING else Action.CREATE
    event_details = app.event_details(step_for_action(action))
    scope = app.progress_scope()
    execution_id = app.context.execution_id
    namespace = target.namespace
    stop = threading.Event()
    deployment_start = threading.Barrier(
        2,
        timeout=barrier_timeout
        if barrier_timeout is not None
        else constants.MONITOR_BARRIER_TIMEOUT_SECONDS,
    )

    def _log(message: str) -> None:
        helper.in_progress(
            channel, ProgressInfo(scope, ProgressLevel.INFO, message, execution_id)
        )
        logger.info(event_details, message)

    def _report() -> None:
        # Before the launch of the deployment
        try:
            info = run_sync(
                get_app_deployment_info(target.kube, app.long_id, namespace)
            )
        except CommandError as e:
            logger.debug(event_details, f"Cannot get deployment information: {e}")
        else:
            _log(
                f"🛰 Application `{app.id}` deployment is going to start: "
                f"You have {len(info.pods)} pod(s) running, "
                f"{len(info.services)} service(s) running, "
                f"{len(info.pvcs)} network volume(s)"
            )

        try:
            deployment_start.wait()
        except threading.BrokenBarrierError:
            return

        while not stop.wait(tick):
            try:
                info = run_sync(
                    get_app_deployment_info(target.kube, app.long_id, namespace)
                )
            except CommandError as e:
                _log(f"Error while retrieving deployment information: {e}")
                continue

            for message in format_app_deployment_info(info, app.name):
                _log(message)

    threading.Thread(target=_report, name="deployment-monitor", daemon=True).start()

    # Wait for the reporter to have sent the initial state
    try:
        deployment_start.wait()
    except threading.BrokenBarrierError:
        logger.debug(event_details, "Deployment monitor is not ready, starting anyway")

    try:
        return long_task()
    finally:
        stop.set()
