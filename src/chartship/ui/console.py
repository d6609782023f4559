"""Console output formatting utilities for chartship."""

from __future__ import annotations

import traceback
from typing import Iterable, Optional

import click


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        click.echo(f"\n{title}")
        click.echo("-" * len(title))

    def print_run_started(self, chart: str, task: str, plan: list[str]) -> None:
        """Print run start information."""
        click.echo(click.style("\nRUN STARTED", fg="blue"))
        click.echo(f"Chart: {chart}")
        click.echo(f"Task: {task}")
        click.echo(f"Plan: {' -> '.join(plan)}")

    def print_plan(self, task: str, plan: list[str]) -> None:
        """Print the resolved execution order without running anything."""
        click.echo(f"Plan for '{task}':")
        for idx, name in enumerate(plan, start=1):
            click.echo(f"  {idx}. {name}")

    def print_task_start(self, name: str) -> None:
        click.echo(click.style(f"\nTASK: {name}", fg="blue"))

    def print_command(self, command: str) -> None:
        click.echo(f"$ {command}")

    def print_success(self, message: str) -> None:
        click.echo(click.style(message, fg="green"))

    def print_warning(self, message: str) -> None:
        click.echo(click.style(message, fg="yellow"))

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Task name
            reason: Failure reason/error message
            exit_code: Optional exit code
            hint: Optional hint for user
        """
        click.echo(click.style(f"TASK FAILED: {name}", fg="red"), err=True)
        if exit_code is not None:
            click.echo(f"Exit code: {exit_code}", err=True)
        if hint:
            click.echo(f"Hint: {hint}", err=True)
        if self.debug:
            click.echo(f"Error details: {reason}", err=True)

    def print_version(self, chart: str, version: str) -> None:
        click.echo(f"{click.style('Chart:', fg='blue')} {chart}")
        click.echo(f"{click.style('Version:', fg='blue')} {version}")

    def print_version_bump(self, old: str, new: str) -> None:
        click.echo(click.style(f"Current version: {old}", fg="yellow"))
        click.echo(click.style(f"New version: {new}", fg="green"))
        click.echo(click.style(f"Version bumped to {new}", fg="green"))
        click.echo(click.style("Don't forget to commit:", fg="yellow"))
        click.echo(f"  git add Chart.yaml && git commit -m 'Bump version to {new}' && git tag v{new}")

    def print_next_steps(self, steps: Iterable[str]) -> None:
        click.echo(click.style("Next steps:", fg="yellow"))
        for idx, step in enumerate(steps, start=1):
            click.echo(f"  {idx}. {step}")

    def print_tasks(self, rows: Iterable[tuple[str, str]]) -> None:
        click.echo(click.style("Available tasks:", fg="blue"))
        for name, description in rows:
            click.echo(f"  {click.style(f'{name:<20}', fg='green')} {description}")

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        click.echo("\n" + "=" * 40)
        click.echo("RESULTS")
        click.echo("=" * 40)
        for task, status in results.items():
            click.echo(f"  {task}: {status.upper()}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        click.echo(click.style(f"\nERROR: {title}", fg="red"), err=True)
        click.echo(message, err=True)
        if details:
            for detail in details:
                click.echo(f"  {detail}", err=True)
        if suggestion:
            click.echo(click.style(f"\n{suggestion}", fg="yellow"), err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            click.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
        else:
            click.echo(f"Error: {exc}", err=True)

    def print_info(self, message: str) -> None:
        click.echo(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            click.echo(f"[DEBUG] {message}", err=True)


# Global console instance (initialized by the CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
