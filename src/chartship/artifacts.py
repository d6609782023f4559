"""Canonical artifact file names. Pure functions, no filesystem access."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .model import ChartMetadata, SemVer

ARCHIVE_SUFFIX = ".tgz"
PROVENANCE_SUFFIX = ".tgz.prov"


def artifact_name(name: str, version: SemVer) -> str:
    return f"{name}-{version}{ARCHIVE_SUFFIX}"


def artifact_path(name: str, version: SemVer, root: str | Path = ".") -> Path:
    return Path(root) / artifact_name(name, version)


def provenance_path(name: str, version: SemVer, root: str | Path = ".") -> Path:
    return Path(root) / f"{name}-{version}{PROVENANCE_SUFFIX}"


def artifact_globs(name: str) -> tuple[str, str]:
    """Patterns matching every packaged version of `name`, signed or not."""
    return (f"{name}-*{ARCHIVE_SUFFIX}", f"{name}-*{PROVENANCE_SUFFIX}")


@dataclass(frozen=True)
class Artifact:
    path: Path
    chart_name: str
    version: SemVer

    @classmethod
    def for_chart(cls, metadata: ChartMetadata, root: str | Path = ".") -> "Artifact":
        return cls(
            path=artifact_path(metadata.name, metadata.version, root),
            chart_name=metadata.name,
            version=metadata.version,
        )

    @property
    def provenance(self) -> Path:
        return provenance_path(self.chart_name, self.version, self.path.parent)
