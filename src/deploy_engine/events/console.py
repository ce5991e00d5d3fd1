"""Rich console listener for interactive runs."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from deploy_engine.events.details import ProgressInfo, ProgressLevel


class ConsoleListener:
    """Prints progress events to a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def deployment_in_progress(self, info: ProgressInfo) -> None:
        self._print("deploy", info)

    def deployment_error(self, info: ProgressInfo) -> None:
        self._print("deploy", info)

    def pause_in_progress(self, info: ProgressInfo) -> None:
        self._print("pause", info)

    def pause_error(self, info: ProgressInfo) -> None:
        self._print("pause", info)

    def delete_in_progress(self, info: ProgressInfo) -> None:
        self._print("delete", info)

    def delete_error(self, info: ProgressInfo) -> None:
        self._print("delete", info)

    def _print(self, channel: str, info: ProgressInfo) -> None:
        message = escape(info.message or "")
        prefix = escape(f"[{info.scope.kind.value}:{info.scope.id}] {channel}")
        match info.level:
            case ProgressLevel.ERROR:
                self.console.print(f"[red]❌ {prefix}: {message}[/red]")
            case ProgressLevel.DEBUG:
                self.console.print(f"[dim]{prefix}: {message}[/dim]")
            case ProgressLevel.INFO:
                self.console.print(f"[blue]ℹ {prefix}: {message}[/blue]")
