"""Cascading page deletion.

Deleting a page removes it together with every page reachable from it
through resolved choices. Reachable descendants are treated as owned by
the deleted subtree even when another surviving branch also leads to
them; such shared pages are deleted too. Hosts that want to keep
convergent pages must check :func:`collect_descendants` first.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from branchbook.models.story import Story

log = get_logger(__name__)


def collect_descendants(story: Story, node_id: str) -> set[str]:
    """Collect ``node_id`` and every page reachable from it.

    BFS over resolved choice edges; dangling targets are skipped.

    Args:
        story: Story to search.
        node_id: Page to start from.

    Returns:
        Set of page ids including ``node_id``. Empty if ``node_id`` is not
        in the story.
    """
    if node_id not in story.nodes:
        return set()

    reached = {node_id}
    queue: deque[str] = deque([node_id])
    while queue:
        for choice in story.nodes[queue.popleft()].choices:
            target = choice.next_node_id
            if target is None or target in reached or target not in story.nodes:
                continue
            reached.add(target)
            queue.append(target)
    return reached


def delete_node(story: Story, node_id: str) -> Story:
    """Delete a page and everything reachable from it.

    Surviving choices that pointed into the deleted set become fresh stubs
    (no target, unexplored) and deleted ids leave ``end_node_ids``.

    The root page cannot be deleted. If a cycle leads from ``node_id`` back
    to the root, the root is kept and every other reachable page still goes.

    Args:
        story: Story to prune. Not modified.
        node_id: Page to delete.

    Returns:
        A new story. Unchanged copy when ``node_id`` is the root or is not
        in the story.
    """
    if node_id == story.start_node_id:
        log.warning("delete_refused_start_node", node_id=node_id)
        return story.model_copy(deep=True)
    if node_id not in story.nodes:
        log.warning("delete_unknown_node", node_id=node_id)
        return story.model_copy(deep=True)

    doomed = collect_descendants(story, node_id)
    doomed.discard(story.start_node_id)

    pruned = story.model_copy(deep=True)
    for doomed_id in doomed:
        del pruned.nodes[doomed_id]

    reset_edges = 0
    for node in pruned.nodes.values():
        for choice in node.choices:
            if choice.next_node_id in doomed:
                choice.next_node_id = None
                choice.is_chosen = False
                reset_edges += 1

    pruned.end_node_ids = [eid for eid in pruned.end_node_ids if eid not in doomed]

    log.info(
        "node_deleted",
        node_id=node_id,
        removed=len(doomed),
        reset_edges=reset_edges,
    )
    return pruned
