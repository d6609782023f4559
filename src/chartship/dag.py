# dag.py
from __future__ import annotations

from typing import Dict, List, Optional

from .config import PipelineConfig
from .context import TaskContext
from .errors import (
    ChartshipError,
    ConfigError,
    CycleError,
    DuplicateTaskError,
    ExternalCommandError,
    ToolNotFoundError,
    UnknownTaskError,
)
from .invoker import CommandInvoker
from .model import ExecutionResult, Task
from .ui.console import Console, get_console
from .versioning import ChartFile


class TaskGraph:
    """
    Registry of named tasks and their `needs` edges.

    Execution order for a target is a depth-first, left-to-right walk of the
    declared `needs` lists: dependencies before dependents, each task at most
    once per run. Tasks run strictly one after another; the first failure
    aborts the rest.
    """

    def __init__(self, invoker: Optional[CommandInvoker] = None, console: Optional[Console] = None):
        self.console = console or get_console()
        self.invoker = invoker or CommandInvoker(console=self.console)
        self._tasks: Dict[str, Task] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, task: Task) -> Task:
        if task.name in self._tasks:
            raise DuplicateTaskError(task.name)
        self._tasks[task.name] = task
        return task

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name=name, known=sorted(self._tasks)) from None

    def tasks(self) -> List[Task]:
        """Registered tasks in registration order."""
        return list(self._tasks.values())

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def check(self) -> None:
        """Validate the whole graph: every edge resolves and nothing is cyclic."""
        for name in self._tasks:
            self.resolve(name)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> List[Task]:
        """
        Return the tasks to run for `name`, in execution order.

        Raises UnknownTaskError for a missing task or edge and CycleError for
        a cycle; both happen here, before anything executes.
        """
        order: List[Task] = []
        done: set[str] = set()
        path: List[str] = []

        def visit(task_name: str, needed_by: str | None) -> None:
            if task_name in done:
                return
            if task_name in path:
                start = path.index(task_name)
                raise CycleError(cycle=path[start:] + [task_name])
            if task_name not in self._tasks:
                raise UnknownTaskError(name=task_name, known=sorted(self._tasks), needed_by=needed_by)

            task = self._tasks[task_name]
            path.append(task_name)
            for dep in task.needs:
                visit(dep, task_name)
            path.pop()

            done.add(task_name)
            order.append(task)

        visit(name, None)
        return order

    def plan(self, name: str) -> List[str]:
        return [t.name for t in self.resolve(name)]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self, name: str, config: Optional[PipelineConfig] = None) -> List[ExecutionResult]:
        config = config or PipelineConfig()
        plan = self.resolve(name)

        ctx = TaskContext(
            task=name,
            target=name,
            config=config,
            chart=ChartFile.in_dir(config.chart_dir),
            invoker=self.invoker,
            console=self.console,
        )

        # Everything that can be known up front fails before the first task runs:
        # configuration first, then the tools.
        for stage in ("preflight", "requires"):
            for task in plan:
                try:
                    if stage == "preflight" and task.preflight is not None:
                        task.preflight(ctx.for_task(task.name))
                    elif stage == "requires":
                        for tool in task.requires:
                            self.invoker.require(tool)
                except (ConfigError, ToolNotFoundError) as exc:
                    if exc.task is None:
                        exc.task = task.name
                    raise

        results: List[ExecutionResult] = []
        for task in plan:
            self.console.print_task_start(task.name)
            try:
                result = task.action(ctx.for_task(task.name)) or ExecutionResult.ok(task.name)
            except ChartshipError as exc:
                if exc.task is None:
                    exc.task = task.name
                exc.results = list(results)
                self.console.print_failure(task.name, reason=str(exc), hint=exc.hint)
                raise

            if not result.succeeded:
                self.console.print_failure(
                    task.name,
                    reason=result.command or "",
                    exit_code=result.exit_code,
                )
                raise ExternalCommandError(
                    task=task.name,
                    exit_code=result.exit_code,
                    command=result.command,
                    results=results,
                )
            results.append(result)

        return results
