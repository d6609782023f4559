# pipeline.py
# The chart release task table: what each named task runs and what it needs.
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from .artifacts import artifact_globs
from .context import TaskContext
from .dag import TaskGraph
from .dsl import announce, chart_name, command, task
from .invoker import CommandInvoker
from .model import BumpKind, ExecutionResult
from .publish import (
    HELM,
    package_chart,
    package_signed_chart,
    push_to_registry,
    regenerate_index,
    report_local_publish,
    require_registry,
    require_signing_key,
)
from .ui.console import Console

HELM_DOCS = "helm-docs"
HELM_DOCS_TAP = "norwoodj/tap/helm-docs"
HELM_DOCS_URL = "https://github.com/norwoodj/helm-docs"


# ---------------------------------------------------------------------
# Task bodies that are not a single external command
# ---------------------------------------------------------------------

def generate_docs(ctx: TaskContext) -> ExecutionResult:
    result = ctx.invoke(HELM_DOCS, ".")
    if result.succeeded:
        ctx.console.print_success("Documentation generated")
    return result


def check_docs(ctx: TaskContext) -> Optional[ExecutionResult]:
    if not ctx.invoker.is_available(HELM_DOCS):
        ctx.console.print_warning(f"{HELM_DOCS} not found, skipping check")
        return None

    result = ctx.invoke(HELM_DOCS, "--dry-run", ".")
    if result.succeeded:
        ctx.console.print_success("Documentation is up to date")
        return result

    if ctx.target == ctx.task:
        # Asked for directly: stale docs are worth a warning, not a failed run.
        ctx.console.print_warning("Documentation is out of date. Run 'chartship run docs' to update")
        return ExecutionResult(task=ctx.task, exit_code=result.exit_code, succeeded=True, command=result.command)

    ctx.console.print_error(
        "Documentation is out of date",
        f"{HELM_DOCS} reports changes that are not committed.",
        suggestion="Run 'chartship run docs' to update",
    )
    return result


def clean_artifacts(ctx: TaskContext) -> None:
    chart_dir = Path(ctx.config.chart_dir)
    name = ctx.metadata().name
    for pattern in artifact_globs(name):
        for path in sorted(chart_dir.glob(pattern)):
            path.unlink()
            ctx.console.print_info(f"Removed {path.name}")
    ctx.console.print_success("Cleanup complete")


def show_version(ctx: TaskContext) -> None:
    metadata = ctx.metadata()
    ctx.console.print_version(metadata.name, str(metadata.version))


def bump_version(kind: BumpKind):
    def _action(ctx: TaskContext) -> None:
        old = ctx.chart.read_version()
        new = ctx.chart.bump(kind)
        ctx.console.print_version_bump(str(old), str(new))

    return _action


def install_tools(ctx: TaskContext) -> Optional[ExecutionResult]:
    if ctx.invoker.is_available(HELM_DOCS):
        ctx.console.print_success(f"{HELM_DOCS} already installed")
        return None
    if sys.platform == "darwin":
        ctx.console.print_info(f"Installing {HELM_DOCS}...")
        return ctx.invoke("brew", "install", HELM_DOCS_TAP)
    ctx.console.print_warning(f"Please install {HELM_DOCS} manually: {HELM_DOCS_URL}")
    return None


# ---------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------

def build_pipeline(invoker: Optional[CommandInvoker] = None, console: Optional[Console] = None) -> TaskGraph:
    graph = TaskGraph(invoker=invoker, console=console)

    graph.register(task("lint", command(HELM, "lint", "."), description="Lint the Helm chart", requires=[HELM]))
    graph.register(task(
        "template",
        command(HELM, "template", chart_name, "."),
        description="Generate templates with default values",
        requires=[HELM],
    ))
    graph.register(task(
        "template-debug",
        command(HELM, "template", chart_name, ".", "--debug"),
        description="Generate templates with debug output",
        requires=[HELM],
    ))
    graph.register(task(
        "template-examples",
        command(HELM, "template", chart_name, ".", "-f", lambda ctx: ctx.config.example_values),
        description="Generate templates using example values",
        requires=[HELM],
    ))
    graph.register(task(
        "validate",
        announce("Validation complete"),
        needs=["lint", "template"],
        description="Validate chart (lint + template)",
    ))

    graph.register(task(
        "docs", generate_docs, description="Generate chart documentation using helm-docs", requires=[HELM_DOCS]
    ))
    graph.register(task("docs-check", check_docs, description="Check if documentation is up to date"))

    graph.register(task(
        "package", package_chart, needs=["validate"], description="Package the Helm chart", requires=[HELM]
    ))
    graph.register(task(
        "package-sign",
        package_signed_chart,
        needs=["validate"],
        description="Package and sign the Helm chart",
        requires=[HELM],
        preflight=require_signing_key,
    ))

    graph.register(task(
        "install", command(HELM, "install", chart_name, "."),
        description="Install the chart in the current namespace", requires=[HELM],
    ))
    graph.register(task(
        "install-dry-run", command(HELM, "install", chart_name, ".", "--dry-run", "--debug"),
        description="Perform a dry-run installation", requires=[HELM],
    ))
    graph.register(task(
        "upgrade", command(HELM, "upgrade", chart_name, "."),
        description="Upgrade the chart in the current namespace", requires=[HELM],
    ))
    graph.register(task(
        "uninstall", command(HELM, "uninstall", chart_name),
        description="Uninstall the chart from the current namespace", requires=[HELM],
    ))
    graph.register(task(
        "test", command(HELM, "test", chart_name), description="Run chart tests", requires=[HELM]
    ))

    graph.register(task("clean", clean_artifacts, description="Clean generated files"))
    graph.register(task(
        "index", regenerate_index, description="Generate Helm repository index", requires=[HELM]
    ))
    graph.register(task(
        "publish",
        report_local_publish,
        needs=["clean", "docs", "validate", "package"],
        description="Full publish workflow (clean, docs, validate, package)",
    ))
    graph.register(task(
        "publish-oci",
        push_to_registry,
        needs=["validate", "package"],
        description="Publish chart to OCI registry",
        requires=[HELM],
        preflight=require_registry,
    ))

    graph.register(task("version", show_version, description="Display current chart version"))
    graph.register(task(
        "version-bump-patch", bump_version(BumpKind.PATCH), description="Bump patch version (0.0.X)"
    ))
    graph.register(task(
        "version-bump-minor", bump_version(BumpKind.MINOR), description="Bump minor version (0.X.0)"
    ))
    graph.register(task(
        "version-bump-major", bump_version(BumpKind.MAJOR), description="Bump major version (X.0.0)"
    ))

    graph.register(task(
        "ci",
        announce("All CI checks passed"),
        needs=["docs-check", "validate"],
        description="Run CI checks (docs-check, validate)",
    ))
    graph.register(task(
        "pre-commit",
        announce("Pre-commit checks passed"),
        needs=["lint", "docs"],
        description="Run pre-commit checks (lint, docs)",
    ))
    graph.register(task("install-tools", install_tools, description="Install required tools (helm-docs)"))

    graph.check()
    return graph
