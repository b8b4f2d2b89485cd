"""Console rendering for change lists and session status."""

from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .core import Change, ChangeKind, ManifestChanges, format_change
from .utils import plural


KIND_ICONS = {
    ChangeKind.ADDED: "[green]+[/green]",
    ChangeKind.REMOVED: "[red]-[/red]",
    ChangeKind.MODIFIED: "[yellow]M[/yellow]",
}


def display_changes(changes: List[Change], console: Console, title: Optional[str] = None) -> None:
    """Print a change list, one ``field: name  from → to`` row per change."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for change in changes:
        console.print(f"  {KIND_ICONS[change.kind]} {format_change(change)}")


def display_manifest_changes(results: List[ManifestChanges], console: Console) -> None:
    """Print changes grouped under a header per package directory."""
    for result in results:
        folder = Path(result.path).parent
        console.print(f"\n[bold cyan]{folder.name}[/bold cyan] [dim]{folder}[/dim]")
        display_changes(result.changes, console)


def display_baseline_summary(paths: List[str], console: Console) -> None:
    """Print the manifests recorded in a baseline."""
    table = Table(title=f"Baseline ({len(paths)} {plural(len(paths), 'manifest', 'manifests')})")
    table.add_column("Package", style="cyan")
    table.add_column("Manifest", style="dim")
    for path in sorted(paths):
        table.add_row(Path(path).parent.name, path)
    console.print(table)


def display_status(status_text: Optional[str], console: Console) -> None:
    """Print the status indicator line, if visible."""
    if status_text is None:
        return
    # Drop the editor icon token for terminal output
    console.print(f"[yellow]{status_text.replace('$(package) ', '')}[/yellow]")
