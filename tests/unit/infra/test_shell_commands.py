"""Tests for the command facades."""

from pathlib import Path
from unittest.mock import AsyncMock

from deploy_engine.infra.k8s import KubectlController, KubernetesController, ScalingKind
from deploy_engine.infra.k8s.controller import CommandResult
from deploy_engine.infra.shell_commands import KubectlCommands, ShellCommands


class TestShellCommands:
    """One facade per kubeconfig and credential environment."""

    def test_tools_share_the_runner_environment(self, tmp_path: Path) -> None:
        commands = ShellCommands(
            tmp_path,
            kubeconfig=tmp_path / "kubeconfig",
            envs={"AWS_REGION": "eu-west-3"},
        )

        assert commands.workspace_root == tmp_path
        assert commands.helm._runner is commands.terraform._runner
        env = commands.helm._runner.environment()
        assert env["AWS_REGION"] == "eu-west-3"
        assert env["KUBECONFIG"] == str(tmp_path / "kubeconfig")

    def test_default_controller_is_kubectl(self, tmp_path: Path) -> None:
        commands = ShellCommands(tmp_path, kubeconfig=tmp_path / "kubeconfig")

        controller = commands.kubectl._controller
        assert isinstance(controller, KubectlController)
        assert controller.kubeconfig == tmp_path / "kubeconfig"


class TestKubectlCommands:
    """The sync facade awaits the controller."""

    def test_delete_pod_is_forced(self) -> None:
        controller = AsyncMock(spec=KubernetesController)
        controller.delete_pod.return_value = CommandResult(success=True)

        result = KubectlCommands(controller).delete_pod("env-123", "app-1")

        assert result.success
        controller.delete_pod.assert_awaited_once_with("env-123", "app-1", force=True)

    def test_scale_and_logs_are_forwarded(self) -> None:
        controller = AsyncMock(spec=KubernetesController)
        controller.scale_replicas.return_value = CommandResult(success=True)
        controller.get_pod_logs.return_value = ["[app-0] started"]
        commands = KubectlCommands(controller)

        commands.scale_replicas("env-123", "appId=app1", ScalingKind.DEPLOYMENT, 0)
        logs = commands.get_logs("env-123", "appId=app1", tail=10)

        controller.scale_replicas.assert_awaited_once_with(
            "env-123", "appId=app1", ScalingKind.DEPLOYMENT, 0
        )
        assert logs == ["[app-0] started"]
        controller.get_pod_logs.assert_awaited_once_with(
            "env-123", "appId=app1", tail=10
        )
