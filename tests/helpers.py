"""Test doubles and factories shared by the test modules."""

from __future__ import annotations

from deploy_engine.events.details import ProgressInfo
from deploy_engine.infra.shell_commands.types import CommandResult
from deploy_engine.models import DatabaseMode, DatabaseOptions


class RecordingListener:
    """Listener keeping every event it receives, in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, ProgressInfo]] = []

    def deployment_in_progress(self, info: ProgressInfo) -> None:
        self.events.append(("deployment_in_progress", info))

    def deployment_error(self, info: ProgressInfo) -> None:
        self.events.append(("deployment_error", info))

    def pause_in_progress(self, info: ProgressInfo) -> None:
        self.events.append(("pause_in_progress", info))

    def pause_error(self, info: ProgressInfo) -> None:
        self.events.append(("pause_error", info))

    def delete_in_progress(self, info: ProgressInfo) -> None:
        self.events.append(("delete_in_progress", info))

    def delete_error(self, info: ProgressInfo) -> None:
        self.events.append(("delete_error", info))

    def channels(self) -> list[str]:
        return [name for name, _ in list(self.events)]

    def messages(self, channel: str | None = None) -> list[str | None]:
        return [
            info.message
            for name, info in list(self.events)
            if channel is None or name == channel
        ]


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(success=True, stdout=stdout, stderr="", returncode=0)


def failed(stderr: str = "boom", returncode: int = 1) -> CommandResult:
    return CommandResult(success=False, stdout="", stderr=stderr, returncode=returncode)


def database_options(mode: DatabaseMode) -> DatabaseOptions:
    return DatabaseOptions(
        login="superuser",
        password="s3cr3t",
        host="db1.example.com",
        port=5432,
        mode=mode,
        disk_size_in_gib=10,
        database_disk_type="gp2",
    )
