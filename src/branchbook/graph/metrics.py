"""Story size estimates and simple statistics.

Pure functions, no graph mutation.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from branchbook.graph.numbering import find_orphans

if TYPE_CHECKING:
    from branchbook.models.story import EndingThresholds, Story

DEFAULT_BRANCHING_FACTOR = 3


@dataclass(frozen=True)
class SizeEstimate:
    """Expected size of a fully explored story."""

    pages: int
    choices: int
    endings: int


@dataclass(frozen=True)
class DiffStats:
    """Word-level change counts between two versions of a text."""

    added: int
    removed: int


@dataclass(frozen=True)
class StoryStats:
    """Structural counts for a story graph."""

    pages: int
    resolved_choices: int
    open_choices: int
    endings: int
    orphans: int


def estimate_story_size(
    thresholds: EndingThresholds,
    branching_factor: int = DEFAULT_BRANCHING_FACTOR,
) -> SizeEstimate:
    """Estimate page, choice and ending counts for a full tree.

    The depth is the average of the three thresholds. A complete tree of
    that depth with ``branching_factor`` choices per page gives the counts.

    Args:
        thresholds: Ending thresholds of the story.
        branching_factor: Choices per page; must be at least 2.

    Returns:
        Rounded estimate. A depth below 1 means a single ending page.
    """
    if branching_factor < 2:
        msg = f"branching_factor must be at least 2, got {branching_factor}"
        raise ValueError(msg)

    depth = round((thresholds.good + thresholds.bad + thresholds.mixed) / 3)
    if depth < 1:
        return SizeEstimate(pages=1, choices=0, endings=1)

    endings = branching_factor**depth
    pages = (branching_factor ** (depth + 1) - 1) // (branching_factor - 1)
    choices = (pages - endings) * branching_factor
    return SizeEstimate(pages=pages, choices=choices, endings=endings)


def word_diff_stats(original: str, suggested: str) -> DiffStats:
    """Count words added and removed between two texts.

    Words are compared as multisets, so reordering alone counts as no change.
    """
    before = Counter(original.split())
    after = Counter(suggested.split())
    return DiffStats(
        added=sum((after - before).values()),
        removed=sum((before - after).values()),
    )


def story_stats(story: Story) -> StoryStats:
    """Count pages, choices, endings and orphans in a story."""
    resolved = 0
    open_ = 0
    for node in story.nodes.values():
        for choice in node.choices:
            if choice.next_node_id is None:
                open_ += 1
            else:
                resolved += 1
    return StoryStats(
        pages=len(story.nodes),
        resolved_choices=resolved,
        open_choices=open_,
        endings=sum(1 for eid in story.end_node_ids if eid in story.nodes),
        orphans=len(find_orphans(story.nodes, story.start_node_id)),
    )
