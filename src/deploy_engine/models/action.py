"""Declared actions driving every lifecycle dispatch."""

from enum import Enum


class Action(Enum):
    """Desired state of a service for one engine invocation."""

    CREATE = "create"
    PAUSE = "pause"
    DELETE = "delete"
    NOTHING = "nothing"
