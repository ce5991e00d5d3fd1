"""Tests for Helm release commands."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from deploy_engine.infra.shell_commands.helm import HelmCommands
from deploy_engine.infra.shell_commands.types import ChartInfo, CommandResult


class TestHelmUpgrade:
    """Tests for the helm upgrade command."""

    @pytest.fixture
    def mock_runner(self) -> MagicMock:
        """Create a mock command runner."""
        runner = MagicMock()
        runner.run.return_value = CommandResult(
            success=True, stdout="Release upgraded", stderr="", returncode=0
        )
        return runner

    @pytest.fixture
    def helm_commands(self, mock_runner: MagicMock) -> HelmCommands:
        """Create HelmCommands instance with mock runner."""
        return HelmCommands(mock_runner)

    @pytest.fixture
    def chart(self) -> ChartInfo:
        return ChartInfo(
            name="application-app1",
            path=Path("/workspace/exec-1/applications/app"),
            namespace="env-123",
            selector="appId=app1",
        )

    def test_upgrade_installs_release_atomically(
        self, helm_commands: HelmCommands, mock_runner: MagicMock, chart: ChartInfo
    ) -> None:
        """Upgrade should install or upgrade with rollback on failure."""
        result = helm_commands.upgrade(chart)

        assert result.success
        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:5] == [
            "helm",
            "upgrade",
            "--install",
            "application-app1",
            "/workspace/exec-1/applications/app",
        ]
        assert "--atomic" in cmd
        assert "--wait" in cmd
        assert cmd[cmd.index("--namespace") + 1] == "env-123"

    def test_upgrade_uses_default_timeout(
        self, helm_commands: HelmCommands, mock_runner: MagicMock, chart: ChartInfo
    ) -> None:
        """The default timeout should be 600 seconds."""
        helm_commands.upgrade(chart)

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[cmd.index("--timeout") + 1] == "600s"

    def test_upgrade_labels_release_with_selector(
        self, helm_commands: HelmCommands, mock_runner: MagicMock, chart: ChartInfo
    ) -> None:
        """The selector should be attached to the release for tracking."""
        helm_commands.upgrade(chart)

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[cmd.index("--labels") + 1] == "appId=app1"

    def test_upgrade_passes_each_value_file(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        """Every value file should be passed with -f, in order."""
        chart = ChartInfo(
            name="postgresql-db1",
            path=Path("/ws"),
            namespace="env-123",
            value_files=[Path("/ws/database-values.yaml"), Path("/ws/extra.yaml")],
        )

        helm_commands.upgrade(chart)

        cmd = mock_runner.run.call_args[0][0]
        flags = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-f"]
        assert flags == ["/ws/database-values.yaml", "/ws/extra.yaml"]

    def test_upgrade_without_atomic_or_selector(
        self, helm_commands: HelmCommands, mock_runner: MagicMock
    ) -> None:
        """Optional flags should be omitted when not requested."""
        chart = ChartInfo(
            name="rel", path=Path("/ws"), namespace="ns", atomic=False, selector=None
        )

        helm_commands.upgrade(chart)

        cmd = mock_runner.run.call_args[0][0]
        assert "--atomic" not in cmd
        assert "--labels" not in cmd

    def test_upgrade_streams_output_when_callback_given(
        self, helm_commands: HelmCommands, mock_runner: MagicMock, chart: ChartInfo
    ) -> None:
        """A callback should switch to the streaming runner."""
        on_output = MagicMock()
        mock_runner.run_streaming.return_value = CommandResult(success=True)

        helm_commands.upgrade(chart, on_output=on_output)

        mock_runner.run_streaming.assert_called_once()
        assert mock_runner.run_streaming.call_args.kwargs["on_output"] is on_output
        mock_runner.run.assert_not_called()


class TestHelmUninstall:
    """Tests for the helm uninstall command."""

    def test_uninstall_waits_for_deletion(self) -> None:
        """Uninstall should target the release in its namespace and wait."""
        runner = MagicMock()
        runner.run.return_value = CommandResult(success=True)

        HelmCommands(runner).uninstall("router-rtr1", "env-123")

        cmd = runner.run.call_args[0][0]
        assert cmd == ["helm", "uninstall", "router-rtr1", "-n", "env-123", "--wait"]

    def test_uninstall_without_wait(self) -> None:
        """Uninstall with wait=False should not include --wait flag."""
        runner = MagicMock()
        runner.run.return_value = CommandResult(success=True)

        HelmCommands(runner).uninstall("router-rtr1", "env-123", wait=False)

        assert "--wait" not in runner.run.call_args[0][0]
