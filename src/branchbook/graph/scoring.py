"""Path scoring along the recorded parent chain.

Before new content is requested for a page, the outcome categories of
the choices leading from the root to that page are counted. Once any
category reaches its ending threshold the next page must be an ending.

The parent map keeps a single predecessor per page (the last one
written), so a page with several incoming edges is scored along one
chain only. That is accepted behavior of the single-parent approach.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from itertools import pairwise
from typing import TYPE_CHECKING, Literal

from branchbook.models.story import SCORED_CATEGORIES

if TYPE_CHECKING:
    from branchbook.models.story import EndingThresholds, OutcomeCategory, Story

EndingType = Literal["good", "bad", "mixed"]


@dataclass
class PathScores:
    """Counts of scored outcome categories along a path."""

    good: int = 0
    bad: int = 0
    mixed: int = 0

    def record(self, category: OutcomeCategory) -> None:
        """Count one edge of ``category``; "none" is ignored."""
        if category in SCORED_CATEGORIES:
            setattr(self, category, getattr(self, category) + 1)

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def build_parent_map(story: Story) -> dict[str, str]:
    """Map each resolved choice target to the page holding the choice.

    Pages are scanned in ``story.nodes`` order and choices in stored order;
    when a page has several parents the last one written wins.

    Args:
        story: Story to scan.

    Returns:
        Child page id to parent page id.
    """
    parent_map: dict[str, str] = {}
    for node_id, node in story.nodes.items():
        for choice in node.choices:
            if choice.next_node_id is not None:
                parent_map[choice.next_node_id] = node_id
    return parent_map


def reconstruct_path(story: Story, target_node_id: str, parent_map: dict[str, str]) -> list[str]:
    """Walk back from ``target_node_id`` to the root through ``parent_map``.

    Returns:
        Page ids from root to target, or an empty list when the chain never
        reaches the root (including chains that loop back on themselves).
    """
    path: list[str] = []
    seen: set[str] = set()
    current: str | None = target_node_id
    while current and current not in seen:
        seen.add(current)
        path.append(current)
        if current == story.start_node_id:
            break
        current = parent_map.get(current)

    path.reverse()
    if not path or path[0] != story.start_node_id:
        return []
    return path


def score_path(story: Story, target_node_id: str, parent_map: dict[str, str]) -> PathScores:
    """Count outcome categories on the root-to-target path.

    For each adjacent (parent, child) pair on the reconstructed path, the
    first choice on the parent whose target is the child is counted.

    Args:
        story: Story containing the path.
        target_node_id: Page to score up to.
        parent_map: Result of :func:`build_parent_map` for ``story``.

    Returns:
        Accumulated counts. All zero when the root is missing or the target
        is not connected to the root through ``parent_map``.
    """
    scores = PathScores()
    if not story.has_start():
        return scores

    path = reconstruct_path(story, target_node_id, parent_map)
    for parent_id, child_id in pairwise(path):
        parent = story.nodes.get(parent_id)
        if parent is None:
            continue
        edge = next((c for c in parent.choices if c.next_node_id == child_id), None)
        if edge is not None:
            scores.record(edge.outcome_category)
    return scores


def determine_ending(scores: PathScores, thresholds: EndingThresholds) -> EndingType | None:
    """Return the ending the story has reached, if any.

    Categories are checked in the order good, bad, mixed; the first whose
    count has reached its threshold wins.
    """
    if scores.good >= thresholds.good:
        return "good"
    if scores.bad >= thresholds.bad:
        return "bad"
    if scores.mixed >= thresholds.mixed:
        return "mixed"
    return None
