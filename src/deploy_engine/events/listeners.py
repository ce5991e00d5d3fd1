"""Progress listeners.

A service exposes an ordered set of listeners. Every progress event is
delivered to each of them, in order, through ``ListenersHelper``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from loguru import logger

from deploy_engine.events.details import ProgressInfo
from deploy_engine.models.action import Action


class Listener(Protocol):
    """Receives progress events for deployments, pauses and deletions."""

    def deployment_in_progress(self, info: ProgressInfo) -> None: ...

    def deployment_error(self, info: ProgressInfo) -> None: ...

    def pause_in_progress(self, info: ProgressInfo) -> None: ...

    def pause_error(self, info: ProgressInfo) -> None: ...

    def delete_in_progress(self, info: ProgressInfo) -> None: ...

    def delete_error(self, info: ProgressInfo) -> None: ...


Listeners = Sequence[Listener]


class ListenersHelper:
    """Fans a progress event out to an ordered set of listeners.

    A listener raising an exception is logged and skipped so that one
    faulty sink cannot starve the others (or kill a reporter thread).
    """

    def __init__(self, listeners: Listeners) -> None:
        self._listeners = tuple(listeners)

    def deployment_in_progress(self, info: ProgressInfo) -> None:
        self._notify("deployment_in_progress", info)

    def deployment_error(self, info: ProgressInfo) -> None:
        self._notify("deployment_error", info)

    def pause_in_progress(self, info: ProgressInfo) -> None:
        self._notify("pause_in_progress", info)

    def pause_error(self, info: ProgressInfo) -> None:
        self._notify("pause_error", info)

    def delete_in_progress(self, info: ProgressInfo) -> None:
        self._notify("delete_in_progress", info)

    def delete_error(self, info: ProgressInfo) -> None:
        self._notify("delete_error", info)

    def in_progress(self, action: Action, info: ProgressInfo) -> None:
        """Send an in-progress event on the channel matching ``action``."""
        match action:
            case Action.CREATE:
                self.deployment_in_progress(info)
            case Action.PAUSE:
                self.pause_in_progress(info)
            case Action.DELETE:
                self.delete_in_progress(info)
            case Action.NOTHING:
                pass

    def error(self, action: Action, info: ProgressInfo) -> None:
        """Send an error event on the channel matching ``action``."""
        match action:
            case Action.CREATE:
                self.deployment_error(info)
            case Action.PAUSE:
                self.pause_error(info)
            case Action.DELETE:
                self.delete_error(info)
            case Action.NOTHING:
                pass

    def _notify(self, method: str, info: ProgressInfo) -> None:
        for listener in self._listeners:
            try:
                getattr(listener, method)(info)
            except Exception:
                logger.exception(
                    f"Listener {type(listener).__name__}.{method} failed "
                    f"for scope {info.scope.id}"
                )
