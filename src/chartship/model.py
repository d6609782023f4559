# model.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .errors import ParseError

if TYPE_CHECKING:
    from .context import TaskContext


_SEMVER_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)$")


class BumpKind(str, Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


@dataclass(frozen=True, order=True)
class SemVer:
    """A MAJOR.MINOR.PATCH triple. Ordering compares the triple left to right."""
    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if not isinstance(part, int) or part < 0:
                raise ValueError(f"SemVer parts must be non-negative integers, got {self.as_tuple()!r}")

    @classmethod
    def parse(cls, text: str, source: str = "<string>") -> "SemVer":
        raw = (text or "").strip()
        match = _SEMVER_RE.match(raw)
        if not match:
            raise ParseError(
                source=source,
                value=raw,
                reason="expected three dot-separated non-negative integers (MAJOR.MINOR.PATCH)",
            )
        major, minor, patch = (int(g) for g in match.groups())
        return cls(major, minor, patch)

    def bump(self, kind: BumpKind | str) -> "SemVer":
        kind = BumpKind(kind)
        if kind is BumpKind.MAJOR:
            return SemVer(self.major + 1, 0, 0)
        if kind is BumpKind.MINOR:
            return SemVer(self.major, self.minor + 1, 0)
        return SemVer(self.major, self.minor, self.patch + 1)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class ChartMetadata:
    """Name and version as persisted in Chart.yaml."""
    name: str
    version: SemVer


@dataclass(frozen=True)
class ExecutionResult:
    task: str
    exit_code: int
    succeeded: bool
    command: str | None = None

    @classmethod
    def from_exit_code(cls, task: str, exit_code: int, command: str | None = None) -> "ExecutionResult":
        return cls(task=task, exit_code=exit_code, succeeded=exit_code == 0, command=command)

    @classmethod
    def ok(cls, task: str) -> "ExecutionResult":
        return cls(task=task, exit_code=0, succeeded=True)


Action = Callable[["TaskContext"], Optional[ExecutionResult]]
Preflight = Callable[["TaskContext"], None]


@dataclass(frozen=True)
class Task:
    """
    A named unit of work in the pipeline.

    `needs` lists the tasks that must run BEFORE this one, in the order they
    should be visited. `requires` lists external binaries the body shells out
    to; they are probed before the run starts. `preflight` validates the
    configuration the body depends on, also before anything runs.
    """
    name: str
    action: Action
    needs: Tuple[str, ...] = ()
    description: str = ""
    requires: Tuple[str, ...] = ()
    preflight: Optional[Preflight] = field(default=None, compare=False)
