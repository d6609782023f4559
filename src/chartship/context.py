from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .config import PipelineConfig
from .invoker import CommandInvoker
from .model import ChartMetadata, ExecutionResult
from .ui.console import Console
from .versioning import ChartFile


@dataclass(frozen=True)
class TaskContext:
    """What a task body gets to work with during one run."""
    task: str
    target: str
    config: PipelineConfig
    chart: ChartFile
    invoker: CommandInvoker
    console: Console

    def metadata(self) -> ChartMetadata:
        # always re-read; a bump earlier in the same run must be visible
        return self.chart.read_metadata()

    def invoke(self, command: str, *args: str, env: Optional[Mapping[str, str]] = None) -> ExecutionResult:
        return self.invoker.run(command, list(args), env, cwd=self.config.chart_dir, task=self.task)

    def for_task(self, name: str) -> "TaskContext":
        return replace(self, task=name)
