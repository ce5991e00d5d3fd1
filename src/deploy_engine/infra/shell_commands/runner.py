"""Process execution shared by the helm, kubectl and terraform wrappers.

Commands run inside the workspace root unless told otherwise. An
executable that cannot be started becomes a failed result carrying the
shell exit code (127 missing, 126 not executable) instead of an
exception, so callers only ever branch on ``CommandResult``.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from .types import CommandResult


class CommandRunner:
    """Runs external tools with the deployment's credentials exported.

    The inherited process environment is extended with the cloud-credential
    variables and, for cluster tools, ``KUBECONFIG``.
    """

    def __init__(
        self,
        workspace_root: Path,
        *,
        envs: Mapping[str, str] | None = None,
        kubeconfig: Path | None = None,
    ) -> None:
        self.workspace_root = workspace_root
        self.envs = dict(envs or {})
        self.kubeconfig = kubeconfig

    def environment(self) -> dict[str, str]:
        """Environment passed to every command."""
        env = {**os.environ, **self.envs}
        if self.kubeconfig is not None:
            env["KUBECONFIG"] = str(self.kubeconfig)
        return env

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
    ) -> CommandResult:
        """Run ``cmd`` to completion and wrap its exit status and output.

        Args:
            cmd: Executable followed by its arguments
            cwd: Directory to run in; the workspace root when omitted
            capture_output: Keep stdout and stderr on the result
        """
        try:
            completed = subprocess.run(
                list(cmd),
                cwd=cwd or self.workspace_root,
                capture_output=capture_output,
                text=True,
                env=self.environment(),
            )
        except OSError as e:
            return CommandResult.not_run(e)

        code = completed.returncode
        return CommandResult(
            success=code == 0,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=code,
        )

    def run_streaming(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Run ``cmd`` and hand each non-empty output line to ``on_output``.

        Stderr is folded into stdout so the callback sees lines in the order
        the tool printed them. The joined lines end up in ``stdout``.
        """
        try:
            process = subprocess.Popen(
                list(cmd),
                cwd=cwd or self.workspace_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
                env=self.environment(),
            )
        except OSError as e:
            return CommandResult.not_run(e)

        collected: list[str] = []
        with process:
            for raw in process.stdout or ():
                text = raw.rstrip("\n")
                if not text:
                    continue
                collected.append(text)
                if on_output is not None:
                    on_output(text)
        code = process.wait()

        return CommandResult(
            success=code == 0,
            stdout="\n".join(collected),
            returncode=code,
        )
