# dsl.py
from __future__ import annotations

from typing import Callable, Iterable, Optional, Union

from .context import TaskContext
from .model import Action, ExecutionResult, Preflight, Task

# A command argument is either literal text or resolved from the context when
# the task runs (e.g. the chart name, which is read fresh from disk).
Arg = Union[str, Callable[[TaskContext], str]]


# ---------------------------------------------------------------------
# Action helpers
# ---------------------------------------------------------------------

def command(tool: str, *args: Arg) -> Action:
    """Action that runs `tool` with `args` in the chart directory."""

    def _action(ctx: TaskContext) -> ExecutionResult:
        resolved = [a(ctx) if callable(a) else a for a in args]
        return ctx.invoke(tool, *resolved)

    return _action


def announce(message: str) -> Action:
    """Action for aggregate tasks: nothing to run, just report."""

    def _action(ctx: TaskContext) -> None:
        ctx.console.print_success(message)

    return _action


def chart_name(ctx: TaskContext) -> str:
    return ctx.metadata().name


# ---------------------------------------------------------------------
# Task helper
# ---------------------------------------------------------------------

def task(
    name: str,
    action: Action,
    *,
    needs: Optional[Iterable[str]] = None,
    description: str = "",
    requires: Optional[Iterable[str]] = None,
    preflight: Optional[Preflight] = None,
) -> Task:
    if not name:
        raise ValueError("task name must not be empty")
    return Task(
        name=name,
        action=action,
        needs=tuple(needs or ()),
        description=description,
        requires=tuple(requires or ()),
        preflight=preflight,
    )
