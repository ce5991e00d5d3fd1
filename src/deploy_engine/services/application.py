"""User applications, released as charts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deploy_engine.constants import DEFAULT_CONSTANTS
from deploy_engine.deployers import (
    delete_stateless_service,
    deploy_stateless_service_error,
    deploy_user_stateless_service,
    scale_down_application,
)
from deploy_engine.events.details import EnvironmentStep
from deploy_engine.events.logger import EngineLogger
from deploy_engine.infra.k8s.controller import ScalingKind
from deploy_engine.models.action import Action
from deploy_engine.models.service import Service, default_template_context
from deploy_engine.models.service_type import ServiceType
from deploy_engine.progress import send_progress_for_application
from deploy_engine.reporting import check_kubernetes_service_error
from deploy_engine.services.common import run_reported, run_with_progress
from deploy_engine.target import DeploymentTarget

APPLICATION_CHART_NAME = "application"


@dataclass(frozen=True)
class Storage:
    """A network volume mounted in every application instance."""

    id: str
    name: str
    mount_point: str
    size_in_gib: int
    storage_class: str = "ssd"

    def to_template_values(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mount_point": self.mount_point,
            "size_in_gib": self.size_in_gib,
            "storage_class": self.storage_class,
        }


@dataclass(frozen=True, kw_only=True)
class Application(Service):
    """A container image run by the user.

    Applications with storage run as a StatefulSet, others as a Deployment.
    """

    image: str
    environment_variables: Mapping[str, str] = field(default_factory=dict)
    storages: tuple[Storage, ...] = ()

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.application()

    @property
    def selector(self) -> str:
        return f"appId={self.id}"

    @property
    def scaling_kind(self) -> ScalingKind:
        return ScalingKind.STATEFULSET if self.storages else ScalingKind.DEPLOYMENT

    # =========================================================================
    # Chart Release
    # =========================================================================

    @property
    def helm_release_name(self) -> str:
        return f"application-{self.id}"

    @property
    def helm_chart_dir(self) -> Path:
        return (
            self.context.lib_root_dir
            / DEFAULT_CONSTANTS.CHARTS_DIR
            / APPLICATION_CHART_NAME
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
        context["image"] = self.image
        context["environment_variables"] = dict(self.environment_variables)
        context["storages"] = [s.to_template_values() for s in self.storages]
        context["is_storage"] = bool(self.storages)
        context["selector"] = self.selector
        return context

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def on_create(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        event_details = self.event_details(EnvironmentStep.DEPLOY)
        send_progress_for_application(
            self,
            Action.CREATE,
            target,
            logger,
            lambda: check_kubernetes_service_error(
                lambda: deploy_user_stateless_service(target, self, logger),
                self,
                target,
                event_details,
                logger,
                "Deployment",
                Action.CREATE,
            ),
        )

    def on_create_check(self, logger: EngineLogger) -> None:
        pass

    def on_create_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        run_with_progress(
            self,
            Action.CREATE,
            target,
            logger,
            lambda: deploy_stateless_service_error(target, self, logger),
        )

    def on_pause(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        run_reported(
            self,
            Action.PAUSE,
            "Pause",
            target,
            logger,
            lambda: scale_down_application(target, self, 0, self.scaling_kind),
        )

    def on_pause_check(self, logger: EngineLogger) -> None:
        pass

    def on_pause_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        logger.debug(
            self.event_details(EnvironmentStep.PAUSE),
            f"Nothing to recover for paused application `{self.name_with_id()}`",
        )

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
            f"Nothing to recover for deleted application `{self.name_with_id()}`",
        )
