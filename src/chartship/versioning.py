# versioning.py
from __future__ import annotations

import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import ConfigError, ParseError
from .model import BumpKind, ChartMetadata, SemVer

CHART_FILE = "Chart.yaml"

# Top-level key only: `appVersion:` and indented dependency versions never match.
# Only the value is swapped; spacing, a trailing comment and the line ending stay.
_VERSION_LINE_RE = re.compile(
    r"^(?P<key>version:[ \t]*)[^\s#]*(?P<tail>(?:[ \t]+#[^\r\n]*)?[ \t]*)(?=\r?$)",
    re.MULTILINE,
)


class ChartFile:
    """
    Reads and rewrites the chart metadata file.

    Nothing is cached: every read goes back to disk so that a task running
    after a version bump sees the new value.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @classmethod
    def in_dir(cls, chart_dir: str | Path) -> "ChartFile":
        return cls(Path(chart_dir) / CHART_FILE)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            raise ConfigError(
                f"Chart metadata file not found: {self.path}",
                hint="Run from the chart directory or pass --chart-dir.",
            )
        try:
            data = yaml.load(self.path.read_text(encoding="utf-8"), Loader=yaml.BaseLoader)
        except yaml.YAMLError as exc:
            raise ParseError(source=str(self.path), value="<document>", reason=str(exc)) from exc
        if not isinstance(data, dict):
            raise ParseError(source=str(self.path), value="<document>", reason="root must be a mapping")
        return data

    def read_metadata(self) -> ChartMetadata:
        data = self._load()
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ParseError(source=str(self.path), value=str(name), reason="missing chart name")
        return ChartMetadata(name=name.strip(), version=self._parse_version(data))

    def read_version(self) -> SemVer:
        return self._parse_version(self._load())

    def _parse_version(self, data: Dict[str, Any]) -> SemVer:
        raw = data.get("version")
        if not isinstance(raw, str):
            raise ParseError(source=str(self.path), value=str(raw), reason="missing or non-scalar version")
        return SemVer.parse(raw, source=str(self.path))

    def write_version(self, version: SemVer) -> None:
        # newline="" keeps CRLF files CRLF on the way back out.
        with self.path.open(encoding="utf-8", newline="") as fh:
            content = fh.read()
        if not _VERSION_LINE_RE.search(content):
            raise ParseError(source=str(self.path), value="", reason="no top-level 'version:' line to update")
        updated = _VERSION_LINE_RE.sub(
            lambda m: f"{m.group('key')}{version}{m.group('tail')}", content, count=1
        )
        _atomic_write_text(self.path, updated)

    def bump(self, kind: BumpKind | str) -> SemVer:
        current = self.read_version()
        new_version = current.bump(kind)
        self.write_version(new_version)
        return new_version


def _atomic_write_text(path: Path, content: str) -> None:
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        newline="",
        delete=False,
        dir=str(path.parent),
        prefix=path.name + ".",
        suffix=".tmp",
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        shutil.copymode(path, temp_path)
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
