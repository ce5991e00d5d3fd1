"""Deployment orchestration engine.

Drives applications, routers and databases through their declared
action (create, pause, delete) with chart releases or provisioner
pipelines, reporting progress to listeners while operations run.
"""

from .config import EngineSettings, load_settings
from .constants import DEFAULT_CONSTANTS, EngineConstants
from .errors import CommandError, EngineError, ErrorCategory
from .events import ConsoleListener, EngineLogger, configure_logging
from .lifecycle import LifecycleOrchestrator
from .models import Action, ExecutionContext
from .target import DeploymentTarget, Environment, Kubernetes

__all__ = [
    "DEFAULT_CONSTANTS",
    "Action",
    "CommandError",
    "ConsoleListener",
    "DeploymentTarget",
    "EngineConstants",
    "EngineError",
    "EngineLogger",
    "EngineSettings",
    "Environment",
    "ErrorCategory",
    "ExecutionContext",
    "Kubernetes",
    "LifecycleOrchestrator",
    "configure_logging",
    "load_settings",
]
