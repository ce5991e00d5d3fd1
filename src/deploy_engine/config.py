"""Runtime settings of the deployment engine.

Settings are read, in increasing priority, from the model defaults, the
``engine:`` section of an optional YAML file and ``DEPLOY_ENGINE_*``
environment variables. A ``.env`` file in the working directory is
loaded first and never overrides variables already set.
"""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from deploy_engine.constants import DEFAULT_CONSTANTS, EngineConstants
from deploy_engine.models.context import ExecutionContext

ENV_PREFIX = "DEPLOY_ENGINE_"
CONFIG_SECTION = "engine"


class EngineSettings(BaseModel):
    """Settings of one engine process."""

    workspace_root_dir: Path = Field(
        default=Path(".deploy-engine/workspace"),
        description="Root under which per-service workspaces are created",
    )
    lib_root_dir: Path = Field(
        default=Path("lib"),
        description="Root holding chart templates and provisioner modules",
    )
    kubeconfig_path: Path | None = Field(
        default=None, description="Kubeconfig file of the target cluster"
    )
    helm_timeout_seconds: int = Field(
        default=DEFAULT_CONSTANTS.HELM_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout of a chart upgrade",
    )
    progress_interval_seconds: float = Field(
        default=DEFAULT_CONSTANTS.PROGRESS_INTERVAL_SECONDS,
        gt=0,
        description="Interval between two progress reports",
    )
    pod_ready_max_attempts: int = Field(
        default=DEFAULT_CONSTANTS.POD_READY_MAX_ATTEMPTS,
        ge=1,
        description="Readiness checks before a service is declared failed",
    )
    pod_ready_delay_seconds: float = Field(
        default=DEFAULT_CONSTANTS.POD_READY_DELAY_SECONDS,
        ge=0,
        description="Delay between two readiness checks",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_logs: bool = Field(default=False, description="Emit logs as JSON records")
    dry_run_deploy: bool = Field(
        default=False, description="Plan provisioning changes without applying them"
    )

    def to_constants(
        self, base: EngineConstants = DEFAULT_CONSTANTS
    ) -> EngineConstants:
        """Engine constants with the tunables of these settings applied."""
        return dataclasses.replace(
            base,
            HELM_TIMEOUT_SECONDS=self.helm_timeout_seconds,
            PROGRESS_INTERVAL_SECONDS=self.progress_interval_seconds,
            POD_READY_MAX_ATTEMPTS=self.pod_ready_max_attempts,
            POD_READY_DELAY_SECONDS=self.pod_ready_delay_seconds,
        )

    def execution_context(
        self,
        organization_id: str,
        cluster_id: str,
        execution_id: str,
        resource_expiration_in_seconds: int | None = None,
    ) -> ExecutionContext:
        """Execution context of one engine invocation under these settings."""
        return ExecutionContext(
            organization_id=organization_id,
            cluster_id=cluster_id,
            execution_id=execution_id,
            workspace_root_dir=self.workspace_root_dir,
            lib_root_dir=self.lib_root_dir,
            resource_expiration_in_seconds=resource_expiration_in_seconds,
            dry_run_deploy=self.dry_run_deploy,
        )


def _read_yaml_section(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path) as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict) or CONFIG_SECTION not in loaded:
        raise ValueError(f"Invalid YAML structure: missing '{CONFIG_SECTION}' key")
    section = loaded[CONFIG_SECTION] or {}
    if not isinstance(section, dict):
        raise ValueError(
            f"Invalid YAML structure: '{CONFIG_SECTION}' must be a mapping"
        )
    return section


def _environment_overrides() -> dict[str, str]:
    fields = EngineSettings.model_fields
    overrides = {}
    for var, value in os.environ.items():
        if not var.startswith(ENV_PREFIX):
            continue
        name = var[len(ENV_PREFIX) :].lower()
        if name in fields:
            overrides[name] = value
        else:
            logger.warning(f"Ignoring unknown setting {var}")
    return overrides


def load_settings(config_path: Path | None = None) -> EngineSettings:
    """Load the engine settings.

    Args:
        config_path: YAML file with a top-level ``engine:`` section

    Returns:
        Validated settings

    Raises:
        ValueError: If the YAML file is malformed or validation fails
        FileNotFoundError: If ``config_path`` does not exist
    """
    load_dotenv(Path.cwd() / ".env", override=False)

    values: dict[str, Any] = {}
    if config_path is not None:
        logger.info(f"Loading engine settings from {config_path}")
        values.update(_read_yaml_section(config_path))

    overrides = _environment_overrides()
    logger.debug(f"Environment overrides: {sorted(overrides)}")  # keys only
    values.update(overrides)

    try:
        return EngineSettings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid engine settings: {e}") from e
