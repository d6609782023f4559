from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from chartship.errors import ConfigError, ParseError
from chartship.model import BumpKind, SemVer
from chartship.versioning import ChartFile


@pytest.mark.parametrize("triple", [(0, 0, 0), (1, 4, 2), (9, 99, 999)])
def test_bump_rules(triple) -> None:
    major, minor, patch = triple
    v = SemVer(*triple)
    assert v.bump(BumpKind.PATCH) == SemVer(major, minor, patch + 1)
    assert v.bump(BumpKind.MINOR) == SemVer(major, minor + 1, 0)
    assert v.bump(BumpKind.MAJOR) == SemVer(major + 1, 0, 0)


def test_bump_accepts_plain_strings() -> None:
    assert SemVer(1, 2, 3).bump("minor") == SemVer(1, 3, 0)
    with pytest.raises(ValueError):
        SemVer(1, 2, 3).bump("micro")


def test_semver_order_is_lexicographic() -> None:
    assert SemVer(1, 9, 9) < SemVer(2, 0, 0)
    assert SemVer(1, 2, 10) > SemVer(1, 2, 9)
    assert sorted([SemVer(1, 10, 0), SemVer(1, 2, 0)]) == [SemVer(1, 2, 0), SemVer(1, 10, 0)]


@pytest.mark.parametrize(
    "raw", ["1.2", "a.b.c", "1.2.-3", "1.2.3.4", "", "v1.2.3", "1.2.3-rc1", "\u0661.\u0662.\u0663"]
)
def test_parse_rejects_malformed(raw: str) -> None:
    with pytest.raises(ParseError):
        SemVer.parse(raw)


def test_negative_parts_are_rejected_at_construction() -> None:
    with pytest.raises(ValueError):
        SemVer(1, -1, 0)


def test_read_metadata(chart_dir: Path) -> None:
    meta = ChartFile.in_dir(chart_dir).read_metadata()
    assert meta.name == "object-bucket"
    assert meta.version == SemVer(1, 4, 2)


@pytest.mark.parametrize("raw", ["1.2", "a.b.c", "1.2.-3"])
def test_read_version_rejects_malformed_file(chart_dir: Path, raw: str) -> None:
    chart = chart_dir / "Chart.yaml"
    chart.write_text(f"name: object-bucket\nversion: {raw}\n", encoding="utf-8")
    with pytest.raises(ParseError):
        ChartFile(chart).read_version()


def test_missing_version_is_parse_error(chart_dir: Path) -> None:
    chart = chart_dir / "Chart.yaml"
    chart.write_text("name: object-bucket\n", encoding="utf-8")
    with pytest.raises(ParseError):
        ChartFile(chart).read_metadata()


def test_missing_chart_file_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        ChartFile.in_dir(tmp_path).read_version()


def test_bump_round_trip(chart_dir: Path) -> None:
    chart = ChartFile.in_dir(chart_dir)
    new = chart.bump(BumpKind.MINOR)
    assert new == SemVer(1, 5, 0)
    assert chart.read_version() == new
    assert ChartFile.in_dir(chart_dir).read_version() == SemVer(1, 5, 0)


def test_bump_only_touches_top_level_version_line(chart_dir: Path) -> None:
    chart_path = chart_dir / "Chart.yaml"
    before = chart_path.read_text(encoding="utf-8").splitlines()

    ChartFile(chart_path).bump(BumpKind.MAJOR)

    after = chart_path.read_text(encoding="utf-8").splitlines()
    changed = [(a, b) for a, b in zip(before, after) if a != b]
    assert changed == [("version: 1.4.2", "version: 2.0.0")]
    assert 'appVersion: "2.0.1"' in after
    assert "    version: 0.3.0" in after


def test_write_leaves_no_temp_files_and_keeps_mode(chart_dir: Path) -> None:
    chart_path = chart_dir / "Chart.yaml"
    os.chmod(chart_path, 0o640)

    ChartFile(chart_path).write_version(SemVer(3, 0, 1))

    assert sorted(p.name for p in chart_dir.iterdir()) == ["Chart.yaml", "values.yaml"]
    assert stat.S_IMODE(chart_path.stat().st_mode) == 0o640


def test_failed_replace_keeps_original(chart_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    chart_path = chart_dir / "Chart.yaml"
    original = chart_path.read_text(encoding="utf-8")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("chartship.versioning.os.replace", boom)
    with pytest.raises(OSError):
        ChartFile(chart_path).bump(BumpKind.PATCH)

    assert chart_path.read_text(encoding="utf-8") == original
    assert sorted(p.name for p in chart_dir.iterdir()) == ["Chart.yaml", "values.yaml"]


def test_failed_write_removes_temp_file(chart_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    chart_path = chart_dir / "Chart.yaml"
    original = chart_path.read_text(encoding="utf-8")

    def no_space(fd):
        raise OSError("no space left on device")

    monkeypatch.setattr("chartship.versioning.os.fsync", no_space)
    with pytest.raises(OSError):
        ChartFile(chart_path).bump(BumpKind.PATCH)

    assert chart_path.read_text(encoding="utf-8") == original
    assert sorted(p.name for p in chart_dir.iterdir()) == ["Chart.yaml", "values.yaml"]


def test_bump_keeps_line_endings_and_comment(chart_dir: Path) -> None:
    chart_path = chart_dir / "Chart.yaml"
    chart_path.write_bytes(
        b"apiVersion: v2\r\n"
        b"name: object-bucket\r\n"
        b"version: 1.4.2 # bumped by release\r\n"
        b'appVersion: "2.0.1"\r\n'
    )

    assert ChartFile(chart_path).bump(BumpKind.MINOR) == SemVer(1, 5, 0)

    assert chart_path.read_bytes() == (
        b"apiVersion: v2\r\n"
        b"name: object-bucket\r\n"
        b"version: 1.5.0 # bumped by release\r\n"
        b'appVersion: "2.0.1"\r\n'
    )
    assert ChartFile(chart_path).read_version() == SemVer(1, 5, 0)
