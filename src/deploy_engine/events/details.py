"""Event context and progress value types.

These are attached to every log record and every progress notification
so that a message can always be traced back to its organization,
cluster, execution and pipeline stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class EnvironmentStep(Enum):
    """Pipeline stage in which an event is emitted."""

    DEPLOY = "deploy"
    PAUSE = "pause"
    DELETE = "delete"
    SCALE_DOWN = "scale_down"
    CHECK = "check"


@dataclass(frozen=True)
class Transmitter:
    """The entity emitting an event."""

    kind: str
    id: str
    name: str


@dataclass(frozen=True)
class EventDetails:
    """Contextual envelope attached to log and progress events."""

    organization_id: str
    cluster_id: str
    execution_id: str
    stage: EnvironmentStep
    transmitter: Transmitter | None = None

    def as_log_context(self) -> dict[str, str]:
        """Flatten the details into structured logging fields."""
        context = {
            "organization_id": self.organization_id,
            "cluster_id": self.cluster_id,
            "execution_id": self.execution_id,
            "stage": self.stage.value,
        }
        if self.transmitter is not None:
            context["transmitter_kind"] = self.transmitter.kind
            context["transmitter_id"] = self.transmitter.id
            context["transmitter_name"] = self.transmitter.name
        return context


class ProgressScopeKind(Enum):
    APPLICATION = "application"
    DATABASE = "database"
    ROUTER = "router"


@dataclass(frozen=True)
class ProgressScope:
    """Routes a progress event to the right UI context."""

    kind: ProgressScopeKind
    id: str


class ProgressLevel(Enum):
    INFO = "info"
    ERROR = "error"
    DEBUG = "debug"


@dataclass(frozen=True)
class ProgressInfo:
    """A single progress notification sent to listeners."""

    scope: ProgressScope
    level: ProgressLevel
    message: str | None
    execution_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
