"""Tests for the application service."""

import dataclasses
from unittest.mock import MagicMock

import pytest

from deploy_engine.errors import KubernetesServiceIssue
from deploy_engine.infra.k8s import ScalingKind
from deploy_engine.services import Storage
from deploy_engine.target import DeploymentTarget
from tests.helpers import RecordingListener, failed

DATA_VOLUME = Storage(id="vol1", name="data", mount_point="/data", size_in_gib=5)


class TestApplicationModel:
    """Tests for derived values and template context."""

    def test_chart_metadata(self, application) -> None:
        lib_root = application.context.lib_root_dir
        assert application.selector == "appId=app1"
        assert application.helm_release_name == "application-app1"
        assert application.helm_chart_dir == lib_root / "charts" / "application"
        assert application.helm_chart_values_dir is None

    def test_scaling_kind_follows_storage(self, application) -> None:
        """Applications with volumes run as StatefulSets."""
        assert application.scaling_kind is ScalingKind.DEPLOYMENT
        stateful = dataclasses.replace(application, storages=(DATA_VOLUME,))
        assert stateful.scaling_kind is ScalingKind.STATEFULSET

    def test_template_context(self, target: DeploymentTarget, application) -> None:
        app = dataclasses.replace(application, storages=(DATA_VOLUME,))

        context = app.template_context(target)

        assert context["image"] == "registry.example.com/app:1.0.0"
        assert context["environment_variables"] == {"LOG_LEVEL": "info"}
        assert context["is_storage"]
        assert context["storages"][0]["mount_point"] == "/data"
        assert context["storages"][0]["storage_class"] == "ssd"
        assert context["selector"] == "appId=app1"


class TestApplicationLifecycle:
    """Tests for the create, pause and delete handlers."""

    def test_create_deploys_and_reports(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        listener: RecordingListener,
        logger: MagicMock,
    ) -> None:
        application.on_create(target, logger)

        mock_commands.helm.upgrade.assert_called_once()
        messages = listener.messages("deployment_in_progress")
        assert messages[0].startswith(
            "🛰 Application `app1` deployment is going to start"
        )
        assert "Deployment succeeded for application App Sanitized" in messages

    def test_pause_scales_to_zero(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        listener: RecordingListener,
        logger: MagicMock,
    ) -> None:
        application.on_pause(target, logger)

        mock_commands.kubectl.scale_replicas.assert_called_once_with(
            "env-123", "appId=app1", ScalingKind.DEPLOYMENT, 0
        )
        assert "Pause succeeded for application App Sanitized" in listener.messages(
            "pause_in_progress"
        )

    def test_pause_stateful_application(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        logger: MagicMock,
    ) -> None:
        app = dataclasses.replace(application, storages=(DATA_VOLUME,))

        app.on_pause(target, logger)

        assert mock_commands.kubectl.scale_replicas.call_args.args[2] is (
            ScalingKind.STATEFULSET
        )

    def test_delete_failure_is_reported(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        listener: RecordingListener,
        logger: MagicMock,
    ) -> None:
        mock_commands.helm.uninstall.return_value = failed("cluster unreachable")

        with pytest.raises(KubernetesServiceIssue):
            application.on_delete(target, logger)

        assert "delete_error" in listener.channels()

    def test_error_hooks_do_not_touch_the_cluster(
        self,
        target: DeploymentTarget,
        mock_commands: MagicMock,
        application,
        logger: MagicMock,
    ) -> None:
        application.on_create_error(target, logger)
        application.on_pause_error(target, logger)
        application.on_delete_error(target, logger)

        assert mock_commands.mock_calls == []
