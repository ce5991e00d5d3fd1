"""Tests for error reporting, version checks and domain checks."""

import dataclasses
import socket
from unittest.mock import MagicMock

import pytest

from deploy_engine.errors import (
    CommandError,
    HelmError,
    KubernetesServiceIssue,
    UnsupportedVersionError,
    VersionParseError,
)
from deploy_engine.events.details import EnvironmentStep, ProgressLevel
from deploy_engine.infra.k8s import PodCondition, PodInfo, PodPhase
from deploy_engine.models import Action, VersionNumber
from deploy_engine.reporting import (
    NO_DEBUG_LOGS,
    check_domains,
    check_kubernetes_service_error,
    check_service_version,
)
from deploy_engine.target import DeploymentTarget
from tests.helpers import RecordingListener


class TestCheckKubernetesServiceError:
    """Tests for the user-facing error reporting pipeline."""

    def test_success(
        self,
        target: DeploymentTarget,
        application,
        listener: RecordingListener,
        logger: MagicMock,
    ) -> None:
        call = MagicMock()
        details = application.event_details(EnvironmentStep.DEPLOY)

        check_kubernetes_service_error(
            call, application, target, details, logger, "Deployment", Action.CREATE
        )

        call.assert_called_once_with()
        assert listener.messages("deployment_in_progress") == [
            "Deployment application App Sanitized",
            "Deployment succeeded for application App Sanitized",
        ]
        logger.error.assert_not_called()

    def test_failure_emits_error_then_debug_diagnostics(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        listener: RecordingListener,
        logger: MagicMock,
    ) -> None:
        """Error summary first, diagnostics second, then a chained issue."""
        details = application.event_details(EnvironmentStep.DEPLOY)
        helm_error = HelmError(
            details,
            "application-app1",
            CommandError("helm upgrade failed", full_details="secret output"),
        )
        mock_commands.kubectl.get_logs.return_value = ["panic: missing DATABASE_URL"]

        def call() -> None:
            raise helm_error

        with pytest.raises(KubernetesServiceIssue) as exc_info:
            check_kubernetes_service_error(
                call, application, target, details, logger, "Deployment", Action.CREATE
            )

        issue = exc_info.value
        assert issue.__cause__ is helm_error
        assert issue.underlying_error is helm_error.underlying_error
        assert "Deployment of application `App Sanitized (app1)` failed" in (
            issue.message
        )

        errors = [info for name, info in listener.events if name == "deployment_error"]
        assert [info.level for info in errors] == [
            ProgressLevel.ERROR,
            ProgressLevel.DEBUG,
        ]
        assert errors[0].message.startswith(
            "Deployment error application App Sanitized : error => "
        )
        assert "secret output" not in errors[0].message
        assert errors[1].message == "panic: missing DATABASE_URL"
        assert logger.error.call_args_list[0].args[0] is helm_error

    def test_diagnostics_include_unmet_conditions(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        listener: RecordingListener,
        logger: MagicMock,
    ) -> None:
        details = application.event_details(EnvironmentStep.DEPLOY)
        mock_commands.kubectl.get_pods.return_value = [
            PodInfo(
                name="app-0",
                namespace="env-123",
                phase=PodPhase.PENDING,
                conditions=[
                    PodCondition(
                        type="PodScheduled",
                        status="False",
                        reason="Unschedulable",
                        message="0/3 nodes are available",
                    )
                ],
            )
        ]

        def call() -> None:
            raise HelmError(details, "application-app1", CommandError("failed"))

        with pytest.raises(KubernetesServiceIssue):
            check_kubernetes_service_error(
                call, application, target, details, logger, "Deployment", Action.CREATE
            )

        debug = listener.messages("deployment_error")[-1]
        assert debug == (
            "Condition not met to start the container: "
            "PodScheduled -> Unschedulable: 0/3 nodes are available"
        )

    def test_failing_diagnostics_do_not_mask_the_error(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        listener: RecordingListener,
        logger: MagicMock,
    ) -> None:
        """Gathering failures fall back to an empty diagnostic set."""
        details = application.event_details(EnvironmentStep.DELETE)
        mock_commands.kubectl.get_logs.side_effect = CommandError("Cannot get logs")
        original = HelmError(details, "application-app1", CommandError("failed"))

        def call() -> None:
            raise original

        with pytest.raises(KubernetesServiceIssue) as exc_info:
            check_kubernetes_service_error(
                call, application, target, details, logger, "Deletion", Action.DELETE
            )

        assert exc_info.value.__cause__ is original
        assert listener.messages("delete_error")[-1] == NO_DEBUG_LOGS
        assert logger.error.call_count == 2


class TestCheckServiceVersion:
    """Tests for the requested/matched version check."""

    def test_same_version(self, application, logger: MagicMock) -> None:
        service = dataclasses.replace(application, version="1.2")
        details = service.event_details(EnvironmentStep.CHECK)

        result = check_service_version(lambda: "1.2", service, details, logger)

        assert result.message is None
        assert result.requested_version == result.matched_version

    def test_different_version_is_advised(
        self, application, listener: RecordingListener, logger: MagicMock
    ) -> None:
        service = dataclasses.replace(application, version="1.2")
        details = service.event_details(EnvironmentStep.CHECK)

        result = check_service_version(lambda: "1.3", service, details, logger)

        assert result.message
        assert result.matched_version == VersionNumber(1, 3)
        assert listener.messages("deployment_in_progress") == [
            "Application version `1.2` has been requested by the user; "
            "but matching version is `1.3`"
        ]

    def test_unresolvable_version_is_unsupported(
        self, application, listener: RecordingListener, logger: MagicMock
    ) -> None:
        service = dataclasses.replace(application, version="1.2")
        details = service.event_details(EnvironmentStep.CHECK)

        def resolve() -> str:
            raise CommandError("no matching version")

        with pytest.raises(UnsupportedVersionError):
            check_service_version(resolve, service, details, logger)

        assert listener.messages("deployment_error") == [
            "Application version 1.2 is not supported!"
        ]
        logger.error.assert_called_once()

    def test_malformed_requested_version(
        self, application, logger: MagicMock
    ) -> None:
        service = dataclasses.replace(application, version="latest")
        details = service.event_details(EnvironmentStep.CHECK)

        with pytest.raises(VersionParseError) as exc_info:
            check_service_version(lambda: "1.3", service, details, logger)

        assert exc_info.value.raw_version == "latest"


class TestCheckDomains:
    """Domain checks are advisory."""

    def test_resolved_and_unresolved_domains(
        self, router, listener: RecordingListener, logger: MagicMock
    ) -> None:
        def resolve(domain: str) -> str:
            if domain == "www.example.org":
                raise socket.gaierror("Name or service not known")
            return "203.0.113.10"

        unresolved = check_domains(
            ["rtr1.example.com", "www.example.org"],
            router,
            router.event_details(EnvironmentStep.CHECK),
            logger,
            resolve=resolve,
        )

        assert unresolved == ["www.example.org"]
        messages = listener.messages("deployment_in_progress")
        assert messages[0] == (
            "Domain rtr1.example.com has been resolved to 203.0.113.10"
        )
        assert messages[1].startswith(
            "Unable to check domain availability for 'www.example.org'"
        )
        assert logger.info.call_count == 2
