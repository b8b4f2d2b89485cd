"""CLI for package-versions."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from .config import load_settings
from .context import WorkspaceContext
from .core import Change
from .display import (
    display_baseline_summary,
    display_changes,
    display_manifest_changes,
    display_status,
)
from .errors import PackageVersionsError
from .session import Session, UpdateChoice
from .utils import plural
from .watcher import DEFAULT_INTERVAL, ManifestWatcher


app = typer.Typer(help="""\
Track dependency versions across package.json manifests and suggest
running an install when they drift from the recorded baseline.""")

console = Console()


class _State:
    roots: List[Path] = []


_state = _State()


@app.callback()
def main_callback(
    root: Optional[List[Path]] = typer.Option(
        None, "--root", "-r", help="Workspace root (repeat for multi-root workspaces)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Global options."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    _state.roots = list(root or [])


def open_session(**kwargs) -> Session:
    """Build a session for the selected roots, exiting cleanly on config errors."""
    try:
        return Session.open(_state.roots or None, **kwargs)
    except PackageVersionsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


def _run(coro):
    """Run a session coroutine, turning known errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except PackageVersionsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


def _started_message(folders: List[Path], changed_only: bool = False) -> None:
    count = len(folders)
    qualifier = "changed " if changed_only else ""
    console.print(
        f"[green]✓[/green] Started install in {count} {qualifier}package "
        f"{plural(count, 'directory', 'directories')}."
    )


@app.command()
def snapshot():
    """Take a full-workspace snapshot, replacing the baseline."""
    session = open_session()
    count = _run(session.take_snapshot())
    display_baseline_summary(session.store.get().paths, console)
    console.print(f"[green]✓[/green] Package versions snapshot updated for workspace ({count}).")


@app.command()
def reset():
    """Clear the baseline and immediately take a fresh snapshot."""
    session = open_session()
    _run(session.reset())
    console.print("[green]✓[/green] Baseline reset and freshly snapshotted.")


@app.command()
def changes(
    path: Path = typer.Argument(..., help="package.json to compare against the baseline"),
):
    """Show version changes for one manifest since the baseline (read-only)."""
    session = open_session()
    result: List[Change] = _run(session.show_changes(path))
    if not result:
        console.print("No version changes since baseline.")
        return
    display_changes(result, console, title="Dependency version changes since baseline")


async def _check(session: Session):
    await session.activate()
    return await session.check_all()


@app.command()
def check():
    """Detect changes in every manifest now and advance the baseline."""
    session = open_session()
    results = _run(_check(session))
    if not results:
        console.print("No changes found.")
        return
    display_manifest_changes(results, console)
    console.print()
    display_status(session.status_text, console)


async def _check_then(session: Session, choice: UpdateChoice):
    await session.activate()
    await session.check_all()
    return await session.show_update_options(choice)


@app.command("update-all")
def update_all():
    """Run the install command in every discovered package directory."""
    session = open_session()
    folders = _run(_check_then(session, UpdateChoice.ALL))
    _started_message(folders)


@app.command("update-changed")
def update_changed():
    """Detect changes, then install only where manifests changed."""
    session = open_session()
    folders = _run(_check_then(session, UpdateChoice.CHANGED))
    if not folders:
        console.print("No changed packages.")
        return
    _started_message(folders, changed_only=True)


@app.command()
def options(
    choice: Optional[UpdateChoice] = typer.Option(
        None, "--choice", "-c", case_sensitive=False, help="Skip the prompt"
    ),
):
    """Detect changes and offer: All / Changed / Show Changes / Dismiss."""
    session = open_session()
    results = _run(_check(session))
    if results:
        display_status(session.status_text, console)
    else:
        console.print("No changes found.")

    if choice is None:
        answer = typer.prompt(
            "Update npm packages? [all/changed/show/dismiss]",
            default=UpdateChoice.DISMISS.value,
        ).strip().lower()
        try:
            choice = UpdateChoice(answer)
        except ValueError:
            console.print(f"[red]✗[/red] Unknown choice: {answer}")
            raise typer.Exit(1)

    if choice == UpdateChoice.SHOW:
        # Detection already advanced the baseline; show what it consumed
        if results:
            display_manifest_changes(results, console)
        return

    outcome = _run(session.show_update_options(choice))
    if choice in (UpdateChoice.ALL, UpdateChoice.CHANGED):
        _started_message(outcome, changed_only=choice == UpdateChoice.CHANGED)
    else:
        console.print("[dim]Dismissed.[/dim]")


async def _watch(session: Session, interval: float):
    await session.activate()
    watcher = ManifestWatcher(session.ctx, session.notify, interval=interval)
    consumer = asyncio.create_task(session.run())
    poller = asyncio.create_task(watcher.run())
    done, pending = await asyncio.wait({consumer, poller}, return_when=asyncio.FIRST_EXCEPTION)
    for task in pending:
        task.cancel()
    session.stop()
    for task in done:
        # Re-raise a failure from either the event source or the consumer
        task.result()


@app.command()
def watch(
    interval: float = typer.Option(DEFAULT_INTERVAL, help="Polling interval in seconds"),
):
    """Watch package.json files and report dependency drift as it happens."""

    def on_detect(path: str, detected: List[Change]):
        display_changes(detected, console, title=str(path))
        display_status(session.status_text, console)

    session = open_session(on_detect=on_detect)
    roots = ", ".join(str(r) for r in session.ctx.roots)
    console.print(f"[bold]Watching[/bold] {roots} [dim](Ctrl-C to stop)[/dim]")
    try:
        _run(_watch(session, interval))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@app.command("config")
def show_config():
    """Show the effective settings for this workspace."""
    ctx = WorkspaceContext(_state.roots or None)
    try:
        settings = load_settings(ctx)
    except PackageVersionsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[bold]Config:[/bold] {ctx.config_path}")
    for key, value in settings.to_dict().items():
        console.print(f"  {key}: {value}")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
