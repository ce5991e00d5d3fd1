"""Routers: public entry points forwarding paths to applications."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from deploy_engine.constants import DEFAULT_CONSTANTS
from deploy_engine.deployers import (
    delete_stateless_service,
    deploy_stateless_service,
    deploy_stateless_service_error,
)
from deploy_engine.events.details import EnvironmentStep
from deploy_engine.events.logger import EngineLogger
from deploy_engine.models.action import Action
from deploy_engine.models.service import Service, default_template_context
from deploy_engine.models.service_type import ServiceType
from deploy_engine.reporting import check_domains
from deploy_engine.services.common import run_reported, run_with_progress
from deploy_engine.target import DeploymentTarget

ROUTER_CHART_NAME = "router"


@dataclass(frozen=True)
class Route:
    """Forwards requests under ``path`` to an application's private port."""

    path: str
    application_name: str
    application_port: int

    def to_template_values(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "application_name": self.application_name,
            "application_port": self.application_port,
        }


@dataclass(frozen=True, kw_only=True)
class Router(Service):
    """Public entry point routing paths to applications.

    Attributes:
        default_domain: Domain generated by the platform
        custom_domains: Domains owned by the user, pointing at the default one
        routes: Path routing rules
    """

    default_domain: str
    custom_domains: tuple[str, ...] = ()
    routes: tuple[Route, ...] = ()
    publicly_accessible: bool = True

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.router()

    @property
    def selector(self) -> str:
        return f"routerId={self.id}"

    @property
    def domains(self) -> tuple[str, ...]:
        return (self.default_domain, *self.custom_domains)

    @property
    def helm_release_name(self) -> str:
        return f"router-{self.id}"

    @property
    def helm_chart_dir(self) -> Path:
        return (
            self.context.lib_root_dir / DEFAULT_CONSTANTS.CHARTS_DIR / ROUTER_CHART_NAME
        )

    @property
    def helm_chart_values_dir(self) -> Path | None:
        return None

    @property
    def helm_chart_external_name_service_dir(self) -> Path:
        return (
            self.context.lib_root_dir
            / DEFAULT_CONSTANTS.CHARTS_DIR
            / DEFAULT_CONSTANTS.EXTERNAL_NAME_SERVICE_DIR
        )

    def template_context(self, target: DeploymentTarget) -> dict[str, Any]:
        context = default_template_context(
            self, target.kubernetes, target.environment
        )
        context["default_domain"] = self.default_domain
        context["custom_domains"] = list(self.custom_domains)
        context["domains"] = list(self.domains)
        context["routes"] = [route.to_template_values() for route in self.routes]
        context["selector"] = self.selector
        return context

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def on_create(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        run_reported(
            self,
            Action.CREATE,
            "Deployment",
            target,
            logger,
            lambda: deploy_stateless_service(target, self, logger),
        )

    def on_create_check(self, logger: EngineLogger) -> None:
        # Custom domains may still be propagating: advisory only
        check_domains(
            self.custom_domains, self, self.event_details(EnvironmentStep.CHECK), logger
        )

    def on_create_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        run_with_progress(
            self,
            Action.CREATE,
            target,
            logger,
            lambda: deploy_stateless_service_error(target, self, logger),
        )

    def on_pause(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        # Routers stay up while their applications are paused
        logger.info(
            self.event_details(EnvironmentStep.PAUSE),
            f"Router `{self.name_with_id()}` is not paused",
        )

    def on_pause_check(self, logger: EngineLogger) -> None:
        pass

    def on_pause_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        pass

    def on_delete(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        event_details = self.event_details(EnvironmentStep.DELETE)
        run_reported(
            self,
            Action.DELETE,
            "Deletion",
            target,
            logger,
            lambda: delete_stateless_service(target, self, event_details),
        )

    def on_delete_check(self, logger: EngineLogger) -> None:
        pass

    def on_delete_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        logger.debug(
            self.event_details(EnvironmentStep.DELETE),
            f"Nothing to recover for deleted router `{self.name_with_id()}`",
        )
