"""Engine constants.

This module centralizes all magic strings, timeouts and naming rules
used while deploying, pausing and deleting services.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConstants:
    """Constants for chart-release and provisioning deployments.

    All attributes are immutable. Use ``dataclasses.replace`` (or
    ``EngineSettings.to_constants``) to derive a tuned copy.
    """

    # Chart manager
    HELM_TIMEOUT_SECONDS: int = 600
    HELM_ATOMIC: bool = True

    # Pod readiness polling after a chart release
    POD_READY_MAX_ATTEMPTS: int = 30
    POD_READY_DELAY_SECONDS: float = 10.0

    # Progress reporting
    PROGRESS_INTERVAL_SECONDS: float = 10.0
    MONITOR_BARRIER_TIMEOUT_SECONDS: float = 60.0

    # Workspace layout
    APPLICATIONS_DIR: str = "applications"
    DATABASES_DIR: str = "databases"
    ROUTERS_DIR: str = "routers"
    EXTERNAL_NAME_SERVICE_DIR: str = "external-name-svc"
    DATABASE_VALUES_FILE: str = "database-values.yaml"

    # Library layout (charts and provisioner modules)
    CHARTS_DIR: str = "charts"
    CHART_VALUES_DIR: str = "chart_values"
    TERRAFORM_DIR: str = "terraform"
    TERRAFORM_COMMON_DIR: str = "common"

    # Cluster naming
    NAMESPACE_TTL_LABEL: str = "ttl"
    TFSTATE_SECRET_PREFIX: str = "tfstate-default-"
    CLUSTER_DOMAIN: str = "svc.cluster.local"
    MANAGED_DNS_SUFFIX: str = "-dns"

    # Diagnostics
    LOG_TAIL_LINES: int = 100
    WAITING_MESSAGE_FALLBACK: str = "No message..."


DEFAULT_CONSTANTS = EngineConstants()
