"""Databases: self-hosted ones run as charts, managed ones are provisioned.

Both kinds share chart and provisioner metadata. Whether a database is
managed decides the strategy used by the provisioner deployer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from deploy_engine.constants import DEFAULT_CONSTANTS
from deploy_engine.deployers import (
    delete_stateful_service,
    deploy_stateful_service,
    get_tfstate_name,
    get_tfstate_suffix,
    scale_down_database,
    stateful_service_error,
)
from deploy_engine.errors import CommandError, UnsupportedVersionError
from deploy_engine.events.details import EnvironmentStep, EventDetails
from deploy_engine.events.logger import EngineLogger
from deploy_engine.models.action import Action
from deploy_engine.models.database import DatabaseMode, DatabaseOptions
from deploy_engine.models.service import Service, default_template_context
from deploy_engine.models.service_type import DatabaseKind, ServiceType
from deploy_engine.models.version import ServiceVersionCheckResult
from deploy_engine.progress import step_for_action
from deploy_engine.reporting import check_domains, check_service_version
from deploy_engine.services.common import run_reported, run_with_progress
from deploy_engine.services.versions import (
    DEFAULT_VERSION_CATALOG,
    DatabaseVersionCatalog,
)
from deploy_engine.target import DeploymentTarget


@dataclass(frozen=True, kw_only=True)
class Database(Service):
    """Shared model of self-hosted and managed databases.

    Attributes:
        kind: Database engine
        options: Credentials, sizing and exposure settings
        fqdn_id: Public fqdn of the database when publicly accessible
        version_catalog: Versions available per engine and mode
    """

    kind: DatabaseKind
    options: DatabaseOptions
    fqdn_id: str
    version_catalog: DatabaseVersionCatalog = DEFAULT_VERSION_CATALOG

    def __post_init__(self) -> None:
        if self.options.mode is not self.mode:
            raise ValueError(
                f"{type(self).__name__} requires options in {self.mode.value} mode, "
                f"got {self.options.mode.value}"
            )

    @property
    def mode(self) -> DatabaseMode:
        if self.is_managed_service:
            return DatabaseMode.MANAGED
        return DatabaseMode.CONTAINER

    @property
    def is_managed_service(self) -> bool:
        return False

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.database(self.kind)

    @property
    def selector(self) -> str:
        return f"databaseId={self.id}"

    def resolve_version(self) -> str:
        """Version that will be deployed for the requested one.

        Raises:
            CommandError: If no available version matches the request
        """
        return self.version_catalog.resolve(self.kind, self.mode, self.version)

    def deployed_version(self, event_details: EventDetails) -> str:
        """Like ``resolve_version``, classified for the deployers.

        Raises:
            UnsupportedVersionError: If no available version matches the request
        """
        try:
            return self.resolve_version()
        except CommandError as e:
            raise UnsupportedVersionError(
                event_details, self.service_type.name, self.version, e
            ) from e

    # =========================================================================
    # Chart Release / Provisioning Metadata
    # =========================================================================

    @property
    def helm_release_name(self) -> str:
        return f"{self.kind.slug}-{self.id}"

    @property
    def helm_chart_dir(self) -> Path:
        return (
            self.context.lib_root_dir / DEFAULT_CONSTANTS.CHARTS_DIR / self.kind.slug
        )

    @property
    def helm_chart_values_dir(self) -> Path | None:
        return (
            self.context.lib_root_dir
            / DEFAULT_CONSTANTS.CHART_VALUES_DIR
            / self.kind.slug
        )

    @property
    def helm_chart_external_name_service_dir(self) -> Path:
        return (
            self.context.lib_root_dir
            / DEFAULT_CONSTANTS.CHARTS_DIR
            / DEFAULT_CONSTANTS.EXTERNAL_NAME_SERVICE_DIR
        )

    @property
    def terraform_common_resource_dir(self) -> Path:
        return (
            self.context.lib_root_dir
            / DEFAULT_CONSTANTS.TERRAFORM_DIR
            / DEFAULT_CONSTANTS.TERRAFORM_COMMON_DIR
        )

    @property
    def terraform_resource_dir(self) -> Path:
        return (
            self.context.lib_root_dir / DEFAULT_CONSTANTS.TERRAFORM_DIR / self.kind.slug
        )

    def template_context(self, target: DeploymentTarget) -> dict[str, Any]:
        context = default_template_context(
            self, target.kubernetes, target.environment
        )
        context.update(
            {
                "database_kind": self.kind.slug,
                "database_options": self.options.to_template_values(),
                "database_login": self.options.login,
                "database_password": self.options.password,
                "database_port": self.options.port,
                "database_disk_size_in_gib": self.options.disk_size_in_gib,
                "database_disk_type": self.options.database_disk_type,
                "version": self.deployed_version(
                    self.event_details(step_for_action(self.action))
                ),
                "fqdn_id": self.fqdn_id,
                "fqdn": self.fqdn(target, self.options.host, self.is_managed_service),
                "selector": self.selector,
                "tfstate_suffix_name": get_tfstate_suffix(self),
                "tfstate_secret_name": get_tfstate_name(self, target.constants),
                "publicly_accessible": self.publicly_accessible,
            }
        )
        return context

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def check_version(self, logger: EngineLogger) -> ServiceVersionCheckResult:
        """Resolve the requested version, warning users when it differs."""
        return check_service_version(
            self.resolve_version,
            self,
            self.event_details(EnvironmentStep.CHECK),
            logger,
        )

    def on_create(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        event_details = self.event_details(EnvironmentStep.DEPLOY)
        run_reported(
            self,
            Action.CREATE,
            "Deployment",
            target,
            logger,
            lambda: deploy_stateful_service(target, self, event_details, logger),
        )

    def on_create_check(self, logger: EngineLogger) -> None:
        self.check_version(logger)
        if self.publicly_accessible:
            check_domains(
                [self.options.host],
                self,
                self.event_details(EnvironmentStep.CHECK),
                logger,
            )

    def on_create_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        event_details = self.event_details(EnvironmentStep.DEPLOY)
        run_with_progress(
            self,
            Action.CREATE,
            target,
            logger,
            lambda: stateful_service_error(target, self, event_details, logger),
        )

    def on_pause(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        run_reported(
            self,
            Action.PAUSE,
            "Pause",
            target,
            logger,
            lambda: scale_down_database(target, self, 0),
        )

    def on_pause_check(self, logger: EngineLogger) -> None:
        pass

    def on_pause_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        event_details = self.event_details(EnvironmentStep.PAUSE)
        run_with_progress(
            self,
            Action.PAUSE,
            target,
            logger,
            lambda: stateful_service_error(target, self, event_details, logger),
        )

    def on_delete(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        event_details = self.event_details(EnvironmentStep.DELETE)
        run_reported(
            self,
            Action.DELETE,
            "Deletion",
            target,
            logger,
            lambda: delete_stateful_service(target, self, event_details, logger),
        )

    def on_delete_check(self, logger: EngineLogger) -> None:
        pass

    def on_delete_error(self, target: DeploymentTarget, logger: EngineLogger) -> None:
        event_details = self.event_details(EnvironmentStep.DELETE)
        run_with_progress(
            self,
            Action.DELETE,
            target,
            logger,
            lambda: stateful_service_error(target, self, event_details, logger),
        )


@dataclass(frozen=True, kw_only=True)
class SelfHostedDatabase(Database):
    """A database running as a StatefulSet on the cluster."""


@dataclass(frozen=True, kw_only=True)
class ManagedDatabase(Database):
    """A database provisioned by the cloud provider."""

    @property
    def is_managed_service(self) -> bool:
        return True
