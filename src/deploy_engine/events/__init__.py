"""Event context, progress listeners and logging sinks."""

from .details import (
    EnvironmentStep,
    EventDetails,
    ProgressInfo,
    ProgressLevel,
    ProgressScope,
    ProgressScopeKind,
    Transmitter,
)
from .listeners import Listener, Listeners, ListenersHelper
from .console import ConsoleListener
from .logger import EngineLogger, configure_logging

__all__ = [
    "EnvironmentStep",
    "EventDetails",
    "ProgressInfo",
    "ProgressLevel",
    "ProgressScope",
    "ProgressScopeKind",
    "Transmitter",
    "Listener",
    "Listeners",
    "ListenersHelper",
    "ConsoleListener",
    "EngineLogger",
    "configure_logging",
]
