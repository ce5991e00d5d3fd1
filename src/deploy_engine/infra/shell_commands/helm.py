"""Chart release commands: ``helm upgrade --install`` and ``helm uninstall``."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .types import ChartInfo, CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class HelmCommands:
    """Releases rendered charts into a namespace."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    @staticmethod
    def upgrade_args(chart: ChartInfo) -> list[str]:
        """Arguments for an idempotent install-or-upgrade of ``chart``."""
        args = [
            "helm",
            "upgrade",
            "--install",
            chart.name,
            str(chart.path),
            "--namespace",
            chart.namespace,
            "--wait",
            "--timeout",
            f"{chart.timeout_seconds}s",
        ]
        if chart.atomic:
            args.append("--atomic")
        if chart.selector:
            args += ["--labels", chart.selector]
        for values_file in chart.value_files:
            args += ["-f", str(values_file)]
        return args

    def upgrade(
        self,
        chart: ChartInfo,
        *,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Install the release, or upgrade it when it already exists.

        Args:
            chart: Release name, chart directory and values to apply
            on_output: Receives helm's output line by line while it runs.
                Without it the output is only available on the result.
        """
        args = self.upgrade_args(chart)
        if on_output is None:
            return self._runner.run(args)
        return self._runner.run_streaming(args, on_output=on_output)

    def uninstall(
        self, release_name: str, namespace: str, *, wait: bool = True
    ) -> CommandResult:
        """Remove a release, blocking until its objects are gone when ``wait``."""
        args = ["helm", "uninstall", release_name, "-n", namespace]
        if wait:
            args.append("--wait")
        return self._runner.run(args)
