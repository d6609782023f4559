# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from chartship.config import (
    ENV_KEYRING,
    ENV_REGISTRY,
    ENV_REPO_URL,
    ENV_SIGNING_KEY,
    PipelineConfig,
)
from chartship.errors import (
    ChartshipError,
    ConfigError,
    ExternalCommandError,
    ToolNotFoundError,
)
from chartship.pipeline import build_pipeline
from chartship.publish import PublishCoordinator
from chartship.ui.console import Console, get_console, set_console
from chartship.versioning import ChartFile

EXIT_TOOL_NOT_FOUND = 127
EXIT_INTERRUPTED = 130


def _chart_label(chart_dir: Path) -> str:
    try:
        meta = ChartFile.in_dir(chart_dir).read_metadata()
        return f"{meta.name} {meta.version}"
    except ChartshipError:
        return chart_dir.resolve().name


def _exit_code_for(exc: ChartshipError) -> int:
    if isinstance(exc, ExternalCommandError):
        if exc.exit_code < 0:
            # Killed by a signal: report it the way a shell would.
            return 128 + abs(exc.exit_code)
        return exc.exit_code or 1
    if isinstance(exc, ToolNotFoundError):
        return EXIT_TOOL_NOT_FOUND
    return 1


def _report(exc: ChartshipError) -> None:
    console = get_console()
    where = f"Task '{exc.task}': " if exc.task else ""
    if isinstance(exc, ExternalCommandError):
        console.print_error(
            f"Task '{exc.task}' failed",
            f"Command exited with code {exc.exit_code}",
            details=[exc.command] if exc.command else None,
        )
    elif isinstance(exc, ToolNotFoundError):
        console.print_error(f"{exc.tool} not found", f"{where}{exc}", suggestion=exc.hint)
    elif isinstance(exc, ConfigError):
        console.print_error("Configuration error", f"{where}{exc}", suggestion=exc.hint)
    else:
        console.print_error(type(exc).__name__, f"{where}{exc}", suggestion=exc.hint)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--chart-dir",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory containing Chart.yaml",
)
@click.pass_context
def cli(ctx, debug, chart_dir):
    """chartship: validate, version, package, sign and publish a Helm chart."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["chart_dir"] = chart_dir


@cli.command()
def tasks():
    """List available tasks."""
    graph = build_pipeline(console=get_console())
    get_console().print_tasks((t.name, t.description) for t in graph.tasks())


@cli.command()
@click.argument("task_name", metavar="TASK")
@click.option("--plan", is_flag=True, default=False, help="Print the execution order and exit")
@click.option("--registry", envvar=ENV_REGISTRY, default=None, help=f"OCI registry reference [env: {ENV_REGISTRY}]")
@click.option("--key", "signing_key", envvar=ENV_SIGNING_KEY, default=None, help=f"Signing key name [env: {ENV_SIGNING_KEY}]")
@click.option("--keyring", envvar=ENV_KEYRING, default=None, help=f"Keyring path [env: {ENV_KEYRING}]")
@click.option("--repo-url", envvar=ENV_REPO_URL, default=None, help=f"Repository base URL for 'index' [env: {ENV_REPO_URL}]")
@click.pass_context
def run(ctx, task_name, plan, registry, signing_key, keyring, repo_url):
    """Run TASK and everything it depends on."""
    console = get_console()
    chart_dir: Path = ctx.obj["chart_dir"]

    try:
        config = PipelineConfig(
            chart_dir=chart_dir,
            registry=registry,
            signing_key=signing_key,
            keyring=keyring,
            repo_url=repo_url,
        )
        graph = build_pipeline(console=console)
        order = graph.plan(task_name)

        if plan:
            console.print_plan(task_name, order)
            return

        console.print_run_started(chart=_chart_label(chart_dir), task=task_name, plan=order)
        results = PublishCoordinator(graph, config).run(task_name)
        console.print_results({r.task: "ok" for r in results})

    except ChartshipError as exc:
        if exc.results is not None and exc.task:
            statuses = {r.task: "ok" for r in exc.results}
            statuses[exc.task] = "failed"
            console.print_results(statuses)
        _report(exc)
        console.print_debug(repr(exc))
        sys.exit(_exit_code_for(exc))
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
