"""Tests for the error taxonomy."""

from pathlib import Path

import pytest

from deploy_engine.errors import (
    CommandError,
    EngineError,
    ErrorCategory,
    HelmError,
    KubeconfigError,
    PodNotReadyError,
    ServiceFailedToStartError,
    TemplateCopyError,
    TemplateRenderError,
    UnsupportedVersionError,
)
from deploy_engine.events.details import EnvironmentStep, EventDetails
from deploy_engine.infra.shell_commands.types import CommandResult


@pytest.fixture
def details() -> EventDetails:
    return EventDetails(
        organization_id="org-1",
        cluster_id="cluster-1",
        execution_id="exec-1",
        stage=EnvironmentStep.DEPLOY,
    )


class TestSafeMessage:
    """Safe messages never leak raw command output."""

    def test_includes_category_and_collaborator_message(
        self, details: EventDetails
    ) -> None:
        underlying = CommandError(
            "helm upgrade failed", full_details="AWS_SECRET_ACCESS_KEY=xyz"
        )
        error = HelmError(details, "application-app1", underlying)

        message = error.to_safe_message()

        assert message == (
            "Chart release failure: Chart release `application-app1` failed "
            "(helm upgrade failed)"
        )
        assert "AWS_SECRET_ACCESS_KEY" not in message
        assert str(error) == message

    def test_without_underlying_error(self, details: EventDetails) -> None:
        error = UnsupportedVersionError(details, "PostgreSQL database", "9")

        assert error.underlying_error is None
        assert error.to_safe_message() == (
            "Unsupported version: PostgreSQL database version `9` is not supported"
        )


class TestClassification:
    """Every error carries its context and cause-based category."""

    def test_template_copy(self, details: EventDetails) -> None:
        underlying = TemplateRenderError("Cannot render template `values.j2.yaml`")
        error = TemplateCopyError(details, "/lib/charts/app", "/ws/app", underlying)

        assert isinstance(error, EngineError)
        assert error.category is ErrorCategory.TEMPLATE_COPY
        assert error.event_details is details
        assert error.source == Path("/lib/charts/app")
        assert error.underlying_error is underlying

    def test_failed_to_start_is_a_readiness_timeout(
        self, details: EventDetails
    ) -> None:
        """Callers catching PodNotReadyError also see start failures."""
        error = ServiceFailedToStartError(
            details, "api (app1)", "Application", "appId=app1", "env-123"
        )

        assert isinstance(error, PodNotReadyError)
        assert error.category is ErrorCategory.SERVICE_FAILED_TO_START
        assert error.message == (
            "Application `api (app1)` failed to start after several retries"
        )

    def test_kubeconfig_without_path(self, details: EventDetails) -> None:
        error = KubeconfigError(details, None)

        assert error.message == "No kubeconfig file configured"


class TestCommandResult:
    """Failed command results become collaborator errors."""

    def test_to_error_keeps_output_and_returncode(self) -> None:
        result = CommandResult(
            success=False, stdout="", stderr="Error: forbidden", returncode=2
        )

        error = result.to_error("Cannot create namespace")

        assert isinstance(error, CommandError)
        assert error.message == "Cannot create namespace"
        assert "forbidden" in error.full_details
        assert error.returncode == 2
