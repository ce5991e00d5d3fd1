"""Shell command abstractions for chart, provisioner and cluster operations.

This package provides one interface per external tool:

- helm: Chart release management
- terraform: Provisioner pipelines
- kubectl: Kubernetes resource management

Usage:
    from deploy_engine.infra.shell_commands import ShellCommands

    commands = ShellCommands(Path("/workspace"), kubeconfig=Path("/tmp/kubeconfig"))
    commands.helm.uninstall("app-z1234", "env-123")
"""

from collections.abc import Mapping
from pathlib import Path

from deploy_engine.infra.k8s import KubectlController, KubernetesController

from .helm import HelmCommands
from .kubectl import KubectlCommands
from .runner import CommandRunner
from .terraform import TerraformCommands
from .types import ChartInfo, CommandResult


class ShellCommands:
    """Unified interface for the tools driven during a deployment.

    All commands share the same kubeconfig and cloud-credential
    environment.

    Attributes:
        helm: Helm-related commands
        terraform: Terraform-related commands
        kubectl: Kubernetes commands

    Example:
        >>> commands = ShellCommands(Path("/ws"), envs={"AWS_REGION": "eu-west-3"})
        >>> commands.helm.upgrade(chart)
    """

    def __init__(
        self,
        workspace_root: Path,
        *,
        kubeconfig: Path | None = None,
        envs: Mapping[str, str] | None = None,
        controller: KubernetesController | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            workspace_root: Default working directory for commands
            kubeconfig: Kubeconfig file for helm and kubectl
            envs: Cloud-credential environment for every command
            controller: Controller backing ``kubectl`` (a KubectlController
                bound to the same kubeconfig and environment by default)
        """
        self._runner = CommandRunner(
            Path(workspace_root), envs=envs, kubeconfig=kubeconfig
        )

        self.helm = HelmCommands(self._runner)
        self.terraform = TerraformCommands(self._runner)
        self.kubectl = KubectlCommands(
            controller or KubectlController(kubeconfig=kubeconfig, envs=envs)
        )

    @property
    def workspace_root(self) -> Path:
        """Get the default working directory."""
        return self._runner.workspace_root


__all__ = [
    "ShellCommands",
    "ChartInfo",
    "CommandResult",
    # Specialized command classes for direct usage
    "HelmCommands",
    "KubectlCommands",
    "TerraformCommands",
    "CommandRunner",
]
