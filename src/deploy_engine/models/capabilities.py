"""Capability interfaces.

Deployers and lifecycle functions declare the narrowest capability set
they need. A concrete service kind satisfies a capability structurally,
so a service missing one is rejected by the type checker rather than
at run time.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from deploy_engine.events.details import (
        EnvironmentStep,
        EventDetails,
        ProgressScope,
    )
    from deploy_engine.events.listeners import Listener
    from deploy_engine.events.logger import EngineLogger
    from deploy_engine.models.action import Action
    from deploy_engine.models.context import ExecutionContext
    from deploy_engine.models.service_type import ServiceType
    from deploy_engine.target import DeploymentTarget


class ServiceLike(Protocol):
    """Identity and derived accessors every deployer relies on."""

    @property
    def context(self) -> ExecutionContext: ...

    @property
    def id(self) -> str: ...

    @property
    def long_id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def version(self) -> str: ...

    @property
    def action(self) -> Action: ...

    @property
    def service_type(self) -> ServiceType: ...

    @property
    def selector(self) -> str | None: ...

    def name_with_id(self) -> str: ...

    def name_with_id_and_version(self) -> str: ...

    def workspace_directory(self) -> Path: ...

    def progress_scope(self) -> ProgressScope: ...

    def event_details(self, stage: EnvironmentStep) -> EventDetails: ...

    def template_context(self, target: DeploymentTarget) -> dict[str, Any]: ...


class Listenable(ServiceLike, Protocol):
    """A service with an ordered set of progress listeners."""

    @property
    def listeners(self) -> tuple[Listener, ...]: ...


class Creatable(Protocol):
    def on_create(self, target: DeploymentTarget, logger: EngineLogger) -> None: ...

    def on_create_check(self, logger: EngineLogger) -> None: ...

    def on_create_error(
        self, target: DeploymentTarget, logger: EngineLogger
    ) -> None: ...


class Pausable(Protocol):
    def on_pause(self, target: DeploymentTarget, logger: EngineLogger) -> None: ...

    def on_pause_check(self, logger: EngineLogger) -> None: ...

    def on_pause_error(
        self, target: DeploymentTarget, logger: EngineLogger
    ) -> None: ...


class Deletable(Protocol):
    def on_delete(self, target: DeploymentTarget, logger: EngineLogger) -> None: ...

    def on_delete_check(self, logger: EngineLogger) -> None: ...

    def on_delete_error(
        self, target: DeploymentTarget, logger: EngineLogger
    ) -> None: ...


class Releasable(ServiceLike, Protocol):
    """Chart-release metadata."""

    @property
    def helm_release_name(self) -> str: ...

    @property
    def helm_chart_dir(self) -> Path: ...

    @property
    def helm_chart_values_dir(self) -> Path | None: ...

    @property
    def helm_chart_external_name_service_dir(self) -> Path: ...


class Provisionable(Releasable, Protocol):
    """Provisioner-module metadata. Non-managed services fall back to charts."""

    @property
    def terraform_common_resource_dir(self) -> Path: ...

    @property
    def terraform_resource_dir(self) -> Path: ...

    @property
    def is_managed_service(self) -> bool: ...


class LifecycleService(Listenable, Creatable, Pausable, Deletable, Protocol):
    """A service the orchestrator can drive through every action."""
