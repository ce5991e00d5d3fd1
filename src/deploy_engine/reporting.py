"""Reporting pipeline: error reporting, version checks and domain checks.

Every failure that reaches users goes through
``check_kubernetes_service_error``: an Error event with a summary, then a
Debug event with the diagnostics gathered from the cluster.
"""

from __future__ import annotations

import socket
from collections.abc import Callable, Iterable

from deploy_engine.deployers.diagnostics import debug_logs
from deploy_engine.errors import (
    CommandError,
    EngineError,
    KubernetesServiceIssue,
    UnsupportedVersionError,
    VersionParseError,
)
from deploy_engine.events.details import EventDetails, ProgressInfo, ProgressLevel
from deploy_engine.events.listeners import ListenersHelper
from deploy_engine.events.logger import EngineLogger
from deploy_engine.models.action import Action
from deploy_engine.models.capabilities import Listenable
from deploy_engine.models.version import ServiceVersionCheckResult, VersionNumber
from deploy_engine.target import DeploymentTarget

NO_DEBUG_LOGS = "<no debug logs>"


def check_kubernetes_service_error(
    call: Callable[[], None],
    service: Listenable,
    target: DeploymentTarget,
    event_details: EventDetails,
    logger: EngineLogger,
    action_verb: str,
    action: Action,
) -> None:
    """Run ``call`` and report its outcome to the service's listeners.

    Args:
        call: Cluster operation to run
        service: Service the operation applies to
        target: Deployment target, used to gather diagnostics
        event_details: Context of the operation
        logger: Engine logger
        action_verb: Verb describing the operation ("Deployment", "Pause"...)
        action: Selects the listener channel

    Raises:
        KubernetesServiceIssue: Chained to the classified failure of ``call``
    """
    helper = ListenersHelper(service.listeners)
    scope = service.progress_scope()
    execution_id = service.context.execution_id
    kind = service.service_type.name.lower()

    message = f"{action_verb} {kind} {service.name}"
    helper.in_progress(
        action, ProgressInfo(scope, ProgressLevel.INFO, message, execution_id)
    )
    logger.info(event_details, message)

    try:
        call()
    except EngineError as err:
        logger.error(
            err,
            f"{action_verb} error with {service.service_type.name} "
            f"{service.name} , id: {service.id}",
        )
        # Only the safe message: raw output may carry credentials
        helper.error(
            action,
            ProgressInfo(
                scope,
                ProgressLevel.ERROR,
                f"{action_verb} error {kind} {service.name} : error => "
                f"{err.to_safe_message()}",
                execution_id,
            ),
        )

        lines = debug_logs(service, target, event_details, logger)
        debug_text = "\n".join(lines) if lines else NO_DEBUG_LOGS
        logger.debug(event_details, debug_text)
        helper.error(
            action,
            ProgressInfo(scope, ProgressLevel.DEBUG, debug_text, execution_id),
        )

        raise KubernetesServiceIssue(
            event_details,
            err.underlying_error,
            message=f"{action_verb} of {kind} `{service.name_with_id()}` failed: "
            f"{err.message}",
        ) from err

    helper.in_progress(
        action,
        ProgressInfo(
            scope,
            ProgressLevel.INFO,
            f"{action_verb} succeeded for {kind} {service.name}",
            execution_id,
        ),
    )


def _parse_version(raw: str, event_details: EventDetails) -> VersionNumber:
    try:
        return VersionNumber.parse(raw)
    except ValueError as e:
        raise VersionParseError(
            event_details, raw, CommandError(str(e), full_details=raw)
        ) from e


def check_service_version(
    resolve: Callable[[], str],
    service: Listenable,
    event_details: EventDetails,
    logger: EngineLogger,
) -> ServiceVersionCheckResult:
    """Compare the requested version with the one that will be deployed.

    Args:
        resolve: Returns the version matching the request; raises
            ``CommandError`` when none is available
        service: Service being checked
        event_details: Context of the check
        logger: Engine logger

    Returns:
        Requested and matched versions, with an advisory message when they differ

    Raises:
        UnsupportedVersionError: If no version matches the request
        VersionParseError: If either version string is malformed
    """
    helper = ListenersHelper(service.listeners)
    scope = service.progress_scope()
    execution_id = service.context.execution_id
    type_name = service.service_type.name

    try:
        matched = resolve()
    except CommandError as e:
        helper.deployment_error(
            ProgressInfo(
                scope,
                ProgressLevel.ERROR,
                f"{type_name} version {service.version} is not supported!",
                execution_id,
            )
        )
        error = UnsupportedVersionError(event_details, type_name, service.version)
        logger.error(error)
        raise error from e

    requested_version = _parse_version(service.version, event_details)
    matched_version = _parse_version(matched, event_details)

    if service.version == matched:
        return ServiceVersionCheckResult(requested_version, matched_version)

    message = (
        f"{type_name} version `{service.version}` has been requested by the user; "
        f"but matching version is `{matched}`"
    )
    logger.info(event_details, message)
    helper.deployment_in_progress(
        ProgressInfo(scope, ProgressLevel.INFO, message, execution_id)
    )
    return ServiceVersionCheckResult(requested_version, matched_version, message)


def check_domains(
    domains: Iterable[str],
    service: Listenable,
    event_details: EventDetails,
    logger: EngineLogger,
    *,
    resolve: Callable[[str], str] | None = None,
) -> list[str]:
    """Check that domains resolve. Advisory only: never raises.

    Args:
        resolve: Name resolver, ``socket.gethostbyname`` by default

    Returns:
        The domains that could not be resolved
    """
    resolve = resolve or socket.gethostbyname
    helper = ListenersHelper(service.listeners)
    scope = service.progress_scope()
    execution_id = service.context.execution_id
    unresolved = []

    for domain in domains:
        try:
            ip = resolve(domain)
        except OSError:
            unresolved.append(domain)
            message = (
                f"Unable to check domain availability for '{domain}'. "
                "It can be due to a too long domain propagation. "
                "Note: this is not critical."
            )
        else:
            message = f"Domain {domain} has been resolved to {ip}"

        helper.deployment_in_progress(
            ProgressInfo(scope, ProgressLevel.INFO, message, execution_id)
        )
        logger.info(event_details, message)

    return unresolved
