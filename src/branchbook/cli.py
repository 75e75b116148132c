"""Branchbook CLI - typer application entry point."""

from __future__ import annotations

import atexit
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from branchbook.config import ConfigError, load_config
from branchbook.graph import (
    GraphCorruptionError,
    NodeNotFoundError,
    assign_page_numbers,
    build_outline,
    build_parent_map,
    check_integrity,
    delete_node,
    determine_ending,
    estimate_story_size,
    find_orphans,
    reconstruct_path,
    render_outline,
    score_path,
    story_stats,
)
from branchbook.models.story import Story
from branchbook.observability import close_file_logging, configure_logging, get_logger
from branchbook.story_file import StoryFileError, load_story, save_story

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="branchbook",
    help="Branchbook: inspect, edit and print branching story books.",
    no_args_is_help=True,
)
console = Console()
log = get_logger(__name__)

# Global state for logging flags (set by callback, used by commands)
_verbose: int = 0
_log_enabled: bool = False

StoryArg = Annotated[
    Path,
    typer.Argument(help="Story file (.cyoa.json)."),
]


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_to_file: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to logs/debug.jsonl next to the story file.",
        ),
    ] = False,
) -> None:
    """Branchbook: inspect, edit and print branching story books."""
    global _verbose, _log_enabled
    _verbose = verbose
    _log_enabled = log_to_file

    # File logging is configured once the story location is known
    configure_logging(verbosity=verbose)


def _configure_story_logging(story_path: Path) -> None:
    if _log_enabled:
        configure_logging(
            verbosity=_verbose, log_to_file=True, logs_dir=story_path.resolve().parent / "logs"
        )
        atexit.register(close_file_logging)


def _load(story_path: Path) -> Story:
    """Load a story file or exit with a readable error."""
    _configure_story_logging(story_path)
    try:
        return load_story(story_path)
    except StoryFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


def _require_node(story: Story, node_id: str) -> None:
    if node_id not in story.nodes:
        error = NodeNotFoundError(node_id=node_id, available=list(story.nodes))
        console.print("[red]Error:[/red] Page not found")
        console.print(error.describe(), markup=False)
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from branchbook import __version__

    console.print(f"Branchbook v{__version__}")


@app.command()
def pages(story_path: StoryArg) -> None:
    """Show the logical page number of every page."""
    story = _load(story_path)
    page_map = assign_page_numbers(story.nodes, story.start_node_id)
    if not page_map:
        console.print(f"[red]Error:[/red] Start page '{story.start_node_id}' is missing.")
        raise typer.Exit(1)

    orphans = set(find_orphans(story.nodes, story.start_node_id))

    table = Table(title=f"Pages: {story.title or story_path.name}")
    table.add_column("Page", justify="right", style="cyan")
    table.add_column("Id")
    table.add_column("Notes", style="dim")
    for node_id, number in sorted(page_map.items(), key=lambda item: item[1]):
        notes = []
        if node_id == story.start_node_id:
            notes.append("start")
        if story.is_ending(node_id):
            notes.append("ending")
        if node_id in orphans:
            notes.append("unreachable")
        table.add_row(str(number), node_id, ", ".join(notes))

    console.print()
    console.print(table)
    console.print()


@app.command()
def score(
    story_path: StoryArg,
    node_id: Annotated[str, typer.Argument(help="Page to score the path to.")],
) -> None:
    """Tally outcome categories along the path from the start to a page."""
    story = _load(story_path)
    _require_node(story, node_id)

    parent_map = build_parent_map(story)
    path = reconstruct_path(story, node_id, parent_map)
    if not path:
        console.print(f"[yellow]Page '{node_id}' is not reachable from the start page.[/yellow]")

    scores = score_path(story, node_id, parent_map)
    ending = determine_ending(scores, story.ending_thresholds)
    thresholds = story.ending_thresholds

    table = Table(title=f"Path score: {node_id}")
    table.add_column("Outcome", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Threshold", justify="right", style="dim")
    table.add_row("good", str(scores.good), str(thresholds.good))
    table.add_row("bad", str(scores.bad), str(thresholds.bad))
    table.add_row("mixed", str(scores.mixed), str(thresholds.mixed))

    console.print()
    console.print(table)
    if path:
        console.print(f"Path length: {len(path)} page(s)")
    if ending:
        console.print(f"[bold]Next page concludes the story with a {ending} ending.[/bold]")
    else:
        console.print("No ending reached yet.")
    console.print()


@app.command("map")
def story_map(
    story_path: StoryArg,
    current: Annotated[
        str | None,
        typer.Option("--current", "-c", help="Highlight this page in the map."),
    ] = None,
) -> None:
    """Show the story as a tree of pages and choices."""
    story = _load(story_path)
    outline = build_outline(story, assign_page_numbers(story.nodes, story.start_node_id))
    if outline is None:
        console.print(f"[red]Error:[/red] Start page '{story.start_node_id}' is missing.")
        raise typer.Exit(1)

    console.print(render_outline(outline, current_node_id=current))


@app.command()
def delete(
    story_path: StoryArg,
    node_id: Annotated[str, typer.Argument(help="Page to delete along with its descendants.")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the result here instead of in place."),
    ] = None,
) -> None:
    """Delete a page and every page reachable from it."""
    story = _load(story_path)
    _require_node(story, node_id)
    if node_id == story.start_node_id:
        console.print("[red]Error:[/red] The start page cannot be deleted.")
        raise typer.Exit(1)

    updated = delete_node(story, node_id)
    removed = len(story.nodes) - len(updated.nodes)
    target = save_story(updated, output or story_path)

    console.print(f"[green]✓[/green] Deleted {removed} page(s); saved to {target}")


@app.command()
def stats(story_path: StoryArg) -> None:
    """Show story size and how it compares with the expected size."""
    story = _load(story_path)
    current = story_stats(story)
    estimate = estimate_story_size(story.ending_thresholds)

    table = Table(title=f"Story statistics: {story.title or story_path.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Current", justify="right")
    table.add_column("Estimated", justify="right", style="dim")
    table.add_row("Pages", str(current.pages), str(estimate.pages))
    total_choices = current.resolved_choices + current.open_choices
    table.add_row("Choices", str(total_choices), str(estimate.choices))
    table.add_row("Endings", str(current.endings), str(estimate.endings))
    table.add_row("Unexplored choices", str(current.open_choices), "-")
    table.add_row("Unreachable pages", str(current.orphans), "-")

    console.print()
    console.print(table)
    console.print()


@app.command()
def check(story_path: StoryArg) -> None:
    """Check the story graph for broken references."""
    story = _load(story_path)
    try:
        check_integrity(story)
    except GraphCorruptionError as e:
        console.print(f"[red]✗[/red] {e}")
        console.print(e.describe(), markup=False)
        raise typer.Exit(1) from None

    console.print("[green]✓[/green] Story graph is consistent")


@app.command()
def export(
    story_path: StoryArg,
    format_name: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: html, pdf, json or txt."),
    ] = "html",
    shuffle: Annotated[
        bool,
        typer.Option("--shuffle", help="Shuffle page order to hide the story structure."),
    ] = False,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed for a reproducible shuffle."),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output-dir", "-o", help="Output directory (default: exports/ next to the story)."
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config", help="Layout settings file (default: branchbook.yaml next to the story)."
        ),
    ] = None,
) -> None:
    """Lay out the story as a printable book and export it."""
    from branchbook.export import build_export_context, get_exporter

    story = _load(story_path)

    try:
        exporter = get_exporter(format_name)
        config = load_config(config_path, search_dir=story_path.resolve().parent)
        context = build_export_context(story, config=config, shuffle=shuffle, seed=seed)
    except (ValueError, ConfigError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    target_dir = output_dir or story_path.resolve().parent / "exports"
    try:
        output_file = exporter.export(context, target_dir)
    except ImportError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    log.info("export_complete", format=format_name, pages=len(context.pages), shuffled=shuffle)
    console.print(
        f"[green]✓[/green] Exported {len(context.pages)} page(s) as {format_name}: {output_file}"
    )


if __name__ == "__main__":
    app()
