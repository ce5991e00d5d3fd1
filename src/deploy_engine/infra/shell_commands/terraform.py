"""Terraform command abstractions.

This module drives the provisioner binary through its init, validate,
plan, apply and destroy steps. Pipelines stop at the first failing step.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class TerraformCommands:
    """Terraform-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Terraform commands.

        Args:
            runner: Runner exporting the target credentials
        """
        self._runner = runner

    # =========================================================================
    # Single Steps
    # =========================================================================

    def init(self, workspace_dir: Path) -> CommandResult:
        """Initialize the working directory (backend and providers)."""
        return self._terraform(workspace_dir, ["init", "-input=false", "-no-color"])

    def validate(self, workspace_dir: Path) -> CommandResult:
        """Validate the configuration files."""
        return self._terraform(workspace_dir, ["validate", "-no-color"])

    def plan(self, workspace_dir: Path) -> CommandResult:
        """Compute the execution plan into ``tf_plan``."""
        return self._terraform(
            workspace_dir, ["plan", "-input=false", "-no-color", "-out", "tf_plan"]
        )

    def apply(self, workspace_dir: Path) -> CommandResult:
        """Apply the plan computed by ``plan``."""
        return self._terraform(
            workspace_dir,
            ["apply", "-input=false", "-no-color", "-auto-approve", "tf_plan"],
        )

    def destroy(self, workspace_dir: Path, *, force: bool = False) -> CommandResult:
        """Destroy every resource tracked by the state."""
        args = ["destroy", "-input=false", "-no-color"]
        if force:
            args.append("-auto-approve")
        return self._terraform(workspace_dir, args)

    # =========================================================================
    # Pipelines
    # =========================================================================

    def init_validate_plan_apply(
        self, workspace_dir: Path, dry_run: bool
    ) -> CommandResult:
        """Run init, validate, plan and (unless ``dry_run``) apply.

        Returns:
            The result of the last step, or of the first failing step
        """
        steps = [self.init, self.validate, self.plan]
        if not dry_run:
            steps.append(self.apply)
        return self._pipeline(workspace_dir, steps)

    def init_validate_destroy(self, workspace_dir: Path, force: bool) -> CommandResult:
        """Run init, validate and destroy.

        Returns:
            The result of the last step, or of the first failing step
        """
        return self._pipeline(
            workspace_dir,
            [
                self.init,
                self.validate,
                lambda path: self.destroy(path, force=force),
            ],
        )

    def _pipeline(
        self,
        workspace_dir: Path,
        steps: Sequence[Callable[[Path], CommandResult]],
    ) -> CommandResult:
        result = CommandResult(success=True)
        for step in steps:
            result = step(workspace_dir)
            if not result.success:
                return result
        return result

    def _terraform(self, workspace_dir: Path, args: list[str]) -> CommandResult:
        result = self._runner.run(["terraform", *args], cwd=workspace_dir)
        if not result.success:
            # Name the failing step in the error output
            result.stderr = f"terraform {args[0]} failed\n{result.stderr}".rstrip()
        return result
