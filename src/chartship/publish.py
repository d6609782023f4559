# publish.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .artifacts import Artifact
from .config import PipelineConfig
from .context import TaskContext
from .dag import TaskGraph
from .errors import ArtifactError
from .model import ExecutionResult
from .versioning import ChartFile

HELM = "helm"
INDEX_FILE = "index.yaml"


# ---------------------------------------------------------------------
# Preflight checks (run before any task in the plan executes)
# ---------------------------------------------------------------------

def require_registry(ctx: TaskContext) -> None:
    ctx.config.require_registry()


def require_signing_key(ctx: TaskContext) -> None:
    ctx.config.require_signing_key()


# ---------------------------------------------------------------------
# Task bodies
# ---------------------------------------------------------------------

def _current_artifact(ctx: TaskContext) -> Artifact:
    return Artifact.for_chart(ctx.metadata(), ctx.config.chart_dir)


def package_chart(ctx: TaskContext) -> ExecutionResult:
    result = ctx.invoke(HELM, "package", ".")
    if not result.succeeded:
        return result

    artifact = _current_artifact(ctx)
    if not artifact.path.exists():
        raise ArtifactError(task=ctx.task, path=str(artifact.path))
    ctx.console.print_success(f"Chart packaged: {artifact.path.name}")
    return result


def package_signed_chart(ctx: TaskContext) -> ExecutionResult:
    key = ctx.config.require_signing_key()
    result = ctx.invoke(
        HELM, "package", "--sign", "--key", key, "--keyring", str(ctx.config.keyring), "."
    )
    if not result.succeeded:
        return result

    # helm can exit 0 without writing provenance; don't call that signed.
    artifact = _current_artifact(ctx)
    for expected in (artifact.path, artifact.provenance):
        if not expected.exists():
            raise ArtifactError(task=ctx.task, path=str(expected))
    ctx.console.print_success(f"Chart packaged and signed: {artifact.path.name}")
    return result


def report_local_publish(ctx: TaskContext) -> None:
    artifact = _current_artifact(ctx)
    ctx.console.print_success(f"Chart ready for publishing: {artifact.path.name}")
    ctx.console.print_next_steps(
        [
            f"Upload {artifact.path.name} to your chart repository",
            "Run 'chartship run index' to update the repository index",
            f"Commit and push the updated {INDEX_FILE}",
        ]
    )


def push_to_registry(ctx: TaskContext) -> ExecutionResult:
    registry = ctx.config.require_registry()
    artifact = _current_artifact(ctx)
    ctx.console.print_info(f"Publishing chart to OCI registry {registry}...")
    result = ctx.invoke(HELM, "push", artifact.path.name, registry)
    if result.succeeded:
        ctx.console.print_success(f"Chart published to {registry}")
    return result


def regenerate_index(ctx: TaskContext) -> ExecutionResult:
    result = ctx.invoke(HELM, "repo", "index", ".", "--url", ctx.config.repo_url)
    if result.succeeded:
        ctx.console.print_success("Repository index generated")
    return result


# ---------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------

class PublishCoordinator:
    """
    Named workflows over a task graph.

    Each method only picks a task and the configuration to run it with; the
    graph does the ordering and the failing.
    """

    def __init__(self, graph: TaskGraph, config: Optional[PipelineConfig] = None):
        self.graph = graph
        self.config = config or PipelineConfig()

    def run(self, name: str, config: Optional[PipelineConfig] = None) -> List[ExecutionResult]:
        return self.graph.run(name, config or self.config)

    def artifact(self, config: Optional[PipelineConfig] = None) -> Artifact:
        config = config or self.config
        metadata = ChartFile.in_dir(config.chart_dir).read_metadata()
        return Artifact.for_chart(metadata, config.chart_dir)

    def _with(self, **update) -> PipelineConfig:
        # Goes through validation, so blank overrides become unset.
        if not update:
            return self.config
        return PipelineConfig.model_validate({**self.config.model_dump(), **update})

    def publish_local(self) -> Artifact:
        """clean, docs, validate, package; returns the packaged artifact."""
        self.run("publish")
        return self.artifact()

    def publish_oci(self, registry_ref: Optional[str] = None) -> Artifact:
        config = self._with(registry=registry_ref) if registry_ref is not None else self.config
        config.require_registry()
        self.run("publish-oci", config)
        return self.artifact(config)

    def sign(self, key: Optional[str] = None, keyring: Optional[str | Path] = None) -> Artifact:
        update = {}
        if key is not None:
            update["signing_key"] = key
        if keyring is not None:
            update["keyring"] = keyring
        config = self._with(**update)
        config.require_signing_key()
        self.run("package-sign", config)
        return self.artifact(config)

    def build_index(self, base_url: Optional[str] = None) -> Path:
        config = self._with(repo_url=base_url) if base_url else self.config
        self.run("index", config)
        return Path(config.chart_dir) / INDEX_FILE
