"""Story map outline.

Builds a depth-first tree of pages and choices from the root. A page that
is already an ancestor on the current branch becomes a cycle leaf instead
of being expanded again; convergent pages reached along different
branches are expanded under each branch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from rich.markup import escape
from rich.tree import Tree

if TYPE_CHECKING:
    from branchbook.models.story import Story

SNIPPET_LENGTH = 70

OutlineKind = Literal["page", "cycle", "stub", "missing"]


@dataclass
class OutlineChoice:
    """A choice under a page, with what it leads to."""

    text: str
    target: OutlineEntry


@dataclass
class OutlineEntry:
    """One entry of the story map."""

    kind: OutlineKind
    node_id: str | None = None
    page_number: int | None = None
    snippet: str = ""
    is_start: bool = False
    is_ending: bool = False
    choices: list[OutlineChoice] = field(default_factory=list)


def snippet(text: str, length: int = SNIPPET_LENGTH) -> str:
    """Shorten ``text`` to ``length`` characters plus an ellipsis."""
    return text[:length] + ("..." if len(text) > length else "")


def build_outline(story: Story, page_map: dict[str, int]) -> OutlineEntry | None:
    """Build the story map from the root.

    The walk keeps an explicit stack, so arbitrarily long chains of pages
    are fine.

    Args:
        story: Story to outline.
        page_map: Logical page numbers, see ``assign_page_numbers``.

    Returns:
        Root entry, or None when the root page is missing.
    """
    if not story.has_start():
        return None

    root = _page_entry(story, story.start_node_id, page_map)
    on_branch = {story.start_node_id}
    stack = [(root, iter(story.nodes[story.start_node_id].choices))]
    while stack:
        entry, remaining = stack[-1]
        choice = next(remaining, None)
        if choice is None:
            stack.pop()
            on_branch.discard(entry.node_id or "")
            continue

        target_id = choice.next_node_id
        if target_id is None:
            target = OutlineEntry(kind="stub")
        elif target_id in on_branch:
            target = OutlineEntry(
                kind="cycle", node_id=target_id, page_number=page_map.get(target_id)
            )
        elif target_id not in story.nodes:
            target = OutlineEntry(kind="missing", node_id=target_id)
        else:
            target = _page_entry(story, target_id, page_map)
            on_branch.add(target_id)
            stack.append((target, iter(story.nodes[target_id].choices)))
        entry.choices.append(OutlineChoice(text=choice.text, target=target))
    return root


def _page_entry(story: Story, node_id: str, page_map: dict[str, int]) -> OutlineEntry:
    return OutlineEntry(
        kind="page",
        node_id=node_id,
        page_number=page_map.get(node_id),
        snippet=snippet(story.nodes[node_id].text),
        is_start=node_id == story.start_node_id,
        is_ending=story.is_ending(node_id),
    )


def render_outline(entry: OutlineEntry, current_node_id: str | None = None) -> Tree:
    """Render an outline as a rich tree."""
    tree = Tree(_entry_label(entry, current_node_id))
    stack = [(tree, entry)]
    while stack:
        parent, current = stack.pop()
        if current.kind != "page":
            continue
        if not current.choices:
            if current.is_ending:
                parent.add("[green]This is an ending.[/green]")
            else:
                parent.add("[dim]No choices from this page.[/dim]")
            continue
        for choice in current.choices:
            branch = parent.add(f"Choice: {escape(choice.text)}")
            child = branch.add(_entry_label(choice.target, current_node_id))
            stack.append((child, choice.target))
    return tree


def _entry_label(entry: OutlineEntry, current_node_id: str | None) -> str:
    if entry.kind == "stub":
        return "[yellow](Leads to an unwritten page)[/yellow]"
    if entry.kind == "missing":
        return f"[red](Missing page {entry.node_id})[/red]"
    if entry.kind == "cycle":
        return f"[red](Cycle, jumps back to page {entry.page_number or '?'})[/red]"

    label = f"[bold]Page {entry.page_number or 0}[/bold]"
    if entry.is_start:
        label += " [cyan](start)[/cyan]"
    if entry.node_id == current_node_id:
        label += " [magenta]<- you are here[/magenta]"
    return f'{label} "{escape(entry.snippet)}"'
