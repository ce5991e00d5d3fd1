"""Tests for the command runner."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from deploy_engine.infra.shell_commands.runner import CommandRunner


class TestCommandRunner:
    """Tests for environment handling and result conversion."""

    def test_environment_includes_credentials_and_kubeconfig(
        self, tmp_path: Path
    ) -> None:
        """Credentials and KUBECONFIG should overlay the process environment."""
        runner = CommandRunner(
            tmp_path,
            envs={"AWS_ACCESS_KEY_ID": "key"},
            kubeconfig=tmp_path / "kubeconfig",
        )

        env = runner.environment()

        assert env["AWS_ACCESS_KEY_ID"] == "key"
        assert env["KUBECONFIG"] == str(tmp_path / "kubeconfig")

    def test_run_converts_completed_process(self, tmp_path: Path) -> None:
        """A non-zero exit code should produce a failed result."""
        runner = CommandRunner(tmp_path)
        completed = MagicMock(returncode=2, stdout="out", stderr="err")

        with patch("subprocess.run", return_value=completed) as mock_run:
            result = runner.run(["helm", "version"])

        assert not result.success
        assert result.returncode == 2
        assert result.stderr == "err"
        assert mock_run.call_args.kwargs["cwd"] == tmp_path

    def test_run_reports_missing_binary(self, tmp_path: Path) -> None:
        """A missing executable should be reported, not raised."""
        runner = CommandRunner(tmp_path)

        with patch("subprocess.run", side_effect=FileNotFoundError("terraform")):
            result = runner.run(["terraform", "version"])

        assert not result.success
        assert result.returncode == 127

    def test_run_reports_non_executable_binary(self, tmp_path: Path) -> None:
        """A binary that cannot be executed gets the shell's 126 code."""
        runner = CommandRunner(tmp_path)

        with patch("subprocess.run", side_effect=PermissionError("helm")):
            result = runner.run(["helm", "version"])

        assert not result.success
        assert result.returncode == 126

    def test_run_streaming_forwards_lines(self, tmp_path: Path) -> None:
        """Each non-empty line reaches the callback and the joined stdout."""
        runner = CommandRunner(tmp_path)
        process = MagicMock()
        process.stdout = iter(["Release installed\n", "\n", "STATUS: deployed\n"])
        process.wait.return_value = 0
        seen: list[str] = []

        with patch("subprocess.Popen", return_value=process):
            result = runner.run_streaming(["helm", "upgrade"], on_output=seen.append)

        assert seen == ["Release installed", "STATUS: deployed"]
        assert result.success
        assert result.stdout == "Release installed\nSTATUS: deployed"
