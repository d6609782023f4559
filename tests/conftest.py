from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pytest
import yaml

from chartship.config import PipelineConfig
from chartship.invoker import CommandInvoker, render_command
from chartship.model import ExecutionResult
from chartship.ui.console import Console

CHART_YAML = """\
apiVersion: v2
name: object-bucket
description: A Helm chart for provisioning object storage buckets
type: application
version: 1.4.2
appVersion: "2.0.1"
dependencies:
  - name: common
    version: 0.3.0
    repository: https://charts.example.com
"""


class RecordingInvoker(CommandInvoker):
    """
    Stands in for the real invoker: records every command instead of starting
    a process.

    `exit_codes` maps a command prefix (e.g. "helm package") to the exit code
    to report; `effects` maps a prefix to a callback run on success, used to
    fake the files a real tool would write.
    """

    def __init__(
        self,
        chart_dir: Path,
        available: Sequence[str] = ("helm", "helm-docs", "brew"),
        exit_codes: Optional[Dict[str, int]] = None,
        effects: Optional[Dict[str, Callable[[Path, List[str]], None]]] = None,
    ):
        super().__init__(console=Console())
        self.chart_dir = chart_dir
        self.available = set(available)
        self.exit_codes = exit_codes or {}
        self.effects = effects or {}
        self.calls: List[Tuple[str, List[str], Optional[str]]] = []

    def is_available(self, tool: str) -> bool:
        return tool in self.available

    def _match(self, table, rendered: str):
        for prefix, value in table.items():
            if rendered.startswith(prefix):
                return value
        return None

    def run(self, command, args=(), env: Optional[Mapping[str, str]] = None, *, cwd=None, task=""):
        self.require(command)
        args = list(args)
        rendered = render_command(command, args)
        self.calls.append((task, [command, *args], str(cwd) if cwd is not None else None))

        code = self._match(self.exit_codes, rendered) or 0
        if code == 0:
            effect = self._match(self.effects, rendered)
            if effect is not None:
                effect(self.chart_dir, args)
        return ExecutionResult.from_exit_code(task, code, command=rendered)

    @property
    def commands(self) -> List[str]:
        return [" ".join(argv) for _task, argv, _cwd in self.calls]

    @property
    def tasks(self) -> List[str]:
        return [task for task, _argv, _cwd in self.calls]


def write_package(chart_dir: Path, args: List[str]) -> None:
    """Fake `helm package`: write the archive (and .prov when signing)."""
    meta = yaml.safe_load((chart_dir / "Chart.yaml").read_text(encoding="utf-8"))
    base = f"{meta['name']}-{meta['version']}.tgz"
    (chart_dir / base).write_bytes(b"archive")
    if "--sign" in args:
        (chart_dir / f"{base}.prov").write_text("signature", encoding="utf-8")


@pytest.fixture()
def chart_dir(tmp_path: Path) -> Path:
    chart = tmp_path / "object-bucket"
    chart.mkdir()
    (chart / "Chart.yaml").write_text(CHART_YAML, encoding="utf-8")
    (chart / "values.yaml").write_text("replicaCount: 1\n", encoding="utf-8")
    return chart


@pytest.fixture()
def invoker(chart_dir: Path) -> RecordingInvoker:
    return RecordingInvoker(chart_dir, effects={"helm package": write_package})


@pytest.fixture()
def config(chart_dir: Path) -> PipelineConfig:
    return PipelineConfig(chart_dir=chart_dir)
