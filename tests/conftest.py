"""Shared fixtures for the deployment engine tests."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from deploy_engine.constants import DEFAULT_CONSTANTS, EngineConstants
from deploy_engine.infra.k8s import KubernetesController
from deploy_engine.models import Action, DatabaseKind, DatabaseMode, ExecutionContext
from deploy_engine.services import (
    Application,
    ManagedDatabase,
    Router,
    SelfHostedDatabase,
)
from deploy_engine.target import DeploymentTarget, Environment, Kubernetes
from tests.helpers import RecordingListener, database_options, ok


@pytest.fixture
def fast_constants() -> EngineConstants:
    """Constants with no delays and small retry budgets."""
    return dataclasses.replace(
        DEFAULT_CONSTANTS,
        POD_READY_MAX_ATTEMPTS=3,
        POD_READY_DELAY_SECONDS=0,
        PROGRESS_INTERVAL_SECONDS=0.05,
        MONITOR_BARRIER_TIMEOUT_SECONDS=2,
    )


@pytest.fixture
def kubeconfig(tmp_path: Path) -> Path:
    path = tmp_path / "kubeconfig"
    path.write_text("apiVersion: v1\nkind: Config\n")
    return path


@pytest.fixture
def lib_root(tmp_path: Path) -> Path:
    """Library root with minimal charts and provisioner modules."""
    root = tmp_path / "lib"
    files = {
        "charts/application/Chart.yaml": "name: application\n",
        "charts/application/values.yaml.j2": "image: {{ image }}\n",
        "charts/router/Chart.yaml": "name: router\n",
        "charts/postgresql/Chart.yaml": "name: postgresql\n",
        "chart_values/postgresql/database-values.yaml.j2": "version: {{ version }}\n",
        "charts/external-name-svc/service.yaml.j2": "externalName: {{ fqdn }}\n",
        "terraform/common/backend.tf.j2": (
            'secret_suffix = "{{ tfstate_suffix_name }}"\n'
        ),
        "terraform/postgresql/main.tf.j2": 'engine_version = "{{ version }}"\n',
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def execution_context(tmp_path: Path, lib_root: Path) -> ExecutionContext:
    return ExecutionContext(
        organization_id="org-1",
        cluster_id="cluster-1",
        execution_id="exec-1",
        workspace_root_dir=tmp_path / "workspace",
        lib_root_dir=lib_root,
    )


@pytest.fixture
def environment() -> Environment:
    return Environment(
        id="123",
        long_id="e1b2c3d4-0000-0000-0000-000000000123",
        project_id="env",
        project_long_id="p1b2c3d4-0000-0000-0000-000000000001",
        owner_id="owner-1",
        organization_id="org-1",
        organization_long_id="o1b2c3d4-0000-0000-0000-000000000001",
    )


@pytest.fixture
def kubernetes(kubeconfig: Path) -> Kubernetes:
    return Kubernetes(
        id="cluster-1",
        name="cluster-one",
        region="eu-west-3",
        kubeconfig_path=kubeconfig,
        credentials={"AWS_DEFAULT_REGION": "eu-west-3"},
    )


@pytest.fixture
def mock_commands() -> MagicMock:
    """Shell commands whose every operation succeeds."""
    commands = MagicMock()
    commands.helm.upgrade.return_value = ok()
    commands.helm.uninstall.return_value = ok()
    commands.terraform.init_validate_plan_apply.return_value = ok()
    commands.terraform.init_validate_destroy.return_value = ok()
    commands.kubectl.create_namespace.return_value = ok()
    commands.kubectl.get_pods.return_value = []
    commands.kubectl.delete_pod.return_value = ok()
    commands.kubectl.check_pods_ready.return_value = True
    commands.kubectl.scale_replicas.return_value = ok()
    commands.kubectl.delete_secret.return_value = ok()
    commands.kubectl.get_logs.return_value = []
    commands.kubectl.get_events.return_value = []
    return commands


@pytest.fixture
def mock_kube() -> AsyncMock:
    """Cluster client returning an empty namespace."""
    kube = AsyncMock(spec=KubernetesController)
    kube.get_pods.return_value = []
    kube.get_services.return_value = []
    kube.get_pvcs.return_value = []
    return kube


@pytest.fixture
def target(
    kubernetes: Kubernetes,
    environment: Environment,
    mock_kube: AsyncMock,
    mock_commands: MagicMock,
    fast_constants: EngineConstants,
) -> DeploymentTarget:
    return DeploymentTarget(
        kubernetes=kubernetes,
        environment=environment,
        kube=mock_kube,
        commands=mock_commands,
        constants=fast_constants,
    )


@pytest.fixture
def logger() -> MagicMock:
    """Engine logger double."""
    return MagicMock()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def application(
    execution_context: ExecutionContext, listener: RecordingListener
) -> Application:
    return Application(
        context=execution_context,
        id="app1",
        long_id="a1b2c3d4-0000-0000-0000-0000000000a1",
        name="App Sanitized",
        version="1.0.0",
        action=Action.CREATE,
        private_port=8080,
        image="registry.example.com/app:1.0.0",
        environment_variables={"LOG_LEVEL": "info"},
        listeners=(listener,),
    )


@pytest.fixture
def router(execution_context: ExecutionContext, listener: RecordingListener) -> Router:
    return Router(
        context=execution_context,
        id="rtr1",
        long_id="r1b2c3d4-0000-0000-0000-0000000000r1",
        name="main router",
        version="1",
        action=Action.CREATE,
        default_domain="rtr1.example.com",
        custom_domains=("www.example.org",),
        listeners=(listener,),
    )


@pytest.fixture
def self_hosted_database(
    execution_context: ExecutionContext, listener: RecordingListener
) -> SelfHostedDatabase:
    return SelfHostedDatabase(
        context=execution_context,
        id="db1",
        long_id="d1b2c3d4-0000-0000-0000-0000000000d1",
        name="orders db",
        version="13",
        action=Action.CREATE,
        private_port=5432,
        kind=DatabaseKind.POSTGRESQL,
        options=database_options(DatabaseMode.CONTAINER),
        fqdn_id="db1",
        listeners=(listener,),
    )


@pytest.fixture
def managed_database(
    execution_context: ExecutionContext, listener: RecordingListener
) -> ManagedDatabase:
    return ManagedDatabase(
        context=execution_context,
        id="db2",
        long_id="d1b2c3d4-0000-0000-0000-0000000000d2",
        name="billing db",
        version="13",
        action=Action.CREATE,
        private_port=5432,
        kind=DatabaseKind.POSTGRESQL,
        options=database_options(DatabaseMode.MANAGED),
        fqdn_id="db2",
        listeners=(listener,),
    )
