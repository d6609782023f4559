# invoker.py
from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from .errors import ToolNotFoundError
from .model import ExecutionResult
from .ui.console import Console, get_console

TOOL_HINTS = {
    "helm": "Install Helm: https://helm.sh/docs/intro/install/",
    "helm-docs": "Install it with: brew install norwoodj/tap/helm-docs (or see https://github.com/norwoodj/helm-docs)",
    "brew": "Install Homebrew: https://brew.sh",
    "git": "Install Git or fix PATH.",
}


def tool_hint(tool: str) -> str:
    return TOOL_HINTS.get(tool, f"Install {tool} or fix PATH.")


def render_command(command: str, args: Sequence[str]) -> str:
    return shlex.join([command, *args])


class CommandInvoker:
    """
    Runs one external command at a time and reports its exit status.

    The child's stdout/stderr are inherited, so the operator sees the tool's
    own output unmodified. A non-zero exit is returned, not raised; the task
    graph decides to abort.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console

    @property
    def _console(self) -> Console:
        return self.console or get_console()

    def is_available(self, tool: str) -> bool:
        return shutil.which(tool) is not None

    def require(self, tool: str) -> None:
        if not self.is_available(tool):
            raise ToolNotFoundError(tool=tool, hint=tool_hint(tool))

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        env: Optional[Mapping[str, str]] = None,
        *,
        cwd: str | Path | None = None,
        task: str = "",
    ) -> ExecutionResult:
        self.require(command)

        rendered = render_command(command, args)
        self._console.print_command(rendered)

        merged: Dict[str, str] = os.environ.copy()
        merged.update(env or {})

        try:
            proc = subprocess.run(
                [command, *args],
                cwd=str(cwd) if cwd is not None else None,
                env=merged,
                check=False,
            )
        except FileNotFoundError as exc:
            # PATH changed between the probe and the launch
            raise ToolNotFoundError(tool=command, hint=tool_hint(command)) from exc

        return ExecutionResult.from_exit_code(task, proc.returncode, command=rendered)
