# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .model import ExecutionResult


class ChartshipError(Exception):
    """
    Base class for every error that aborts a pipeline run.

    `task` names the task that raised or needed the failing input. `results`
    stays None until execution has started; after that it lists the tasks that
    completed before the failure.
    """

    hint: Optional[str] = None
    task: Optional[str] = None
    results: Optional[List["ExecutionResult"]] = None


@dataclass
class ConfigError(ChartshipError):
    """A required input (environment variable, option, file) is missing."""
    message: str
    variable: str | None = None
    hint: str | None = None
    task: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class ParseError(ChartshipError):
    source: str
    value: str
    reason: str

    def __str__(self) -> str:
        return f"{self.source}: cannot parse {self.value!r}: {self.reason}"


@dataclass
class ToolNotFoundError(ChartshipError):
    tool: str
    hint: str | None = None
    task: str | None = None

    def __str__(self) -> str:
        return f"{self.tool} not found"


@dataclass
class ExternalCommandError(ChartshipError):
    """
    A task's command exited non-zero.

    `results` holds the tasks that completed before the failure; they are not
    rolled back.
    """
    task: str = field()
    exit_code: int
    command: str | None = None
    results: List["ExecutionResult"] = field(default_factory=list)

    def __str__(self) -> str:
        msg = f"task '{self.task}' failed (exit={self.exit_code})"
        if self.command:
            msg += f": {self.command}"
        return msg


@dataclass
class CycleError(ChartshipError):
    cycle: List[str]

    def __str__(self) -> str:
        return "task graph has a dependency cycle: " + " -> ".join(self.cycle)


@dataclass
class UnknownTaskError(ChartshipError):
    name: str
    known: List[str]
    needed_by: str | None = None

    def __str__(self) -> str:
        if self.needed_by:
            return f"task '{self.needed_by}' needs unknown task '{self.name}'. Known tasks: {self.known}"
        return f"unknown task '{self.name}'. Known tasks: {self.known}"


@dataclass
class DuplicateTaskError(ChartshipError):
    name: str

    def __str__(self) -> str:
        return f"task '{self.name}' is already registered"


@dataclass
class ArtifactError(ChartshipError):
    """The tool reported success but the expected output file is missing."""
    task: str = field()
    path: str

    def __str__(self) -> str:
        return f"command succeeded but {self.path} was not produced"
