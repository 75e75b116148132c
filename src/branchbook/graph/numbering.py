"""Logical page numbering by breadth-first traversal.

Page numbers only change when reachability or the root changes. Text
edits, illustration changes, and explored flags leave them alone, so
"turn to page N" references stay stable between regenerations.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from branchbook.models.story import StoryNode


def assign_page_numbers(nodes: Mapping[str, StoryNode], start_node_id: str) -> dict[str, int]:
    """Map every page id to a sequential page number.

    Algorithm:
        1. BFS from the root, visiting choices in stored order. The root is
           page 1; each newly discovered page gets the next number.
        2. A page is enqueued at most once, which makes cycles and
           convergent edges safe. Dangling targets are skipped.
        3. Pages never reached (orphans) are appended in ascending id order.

    Args:
        nodes: Page id to page.
        start_node_id: Root page id.

    Returns:
        Page id to page number (1-based), in numbering order. Empty if the
        root is not in ``nodes``.
    """
    page_map: dict[str, int] = {}
    if start_node_id not in nodes:
        return page_map

    queue: deque[str] = deque([start_node_id])
    visited = {start_node_id}
    counter = 1

    while queue:
        node_id = queue.popleft()
        page_map[node_id] = counter
        counter += 1

        for choice in nodes[node_id].choices:
            target = choice.next_node_id
            if target is None or target in visited or target not in nodes:
                continue
            visited.add(target)
            queue.append(target)

    for orphan_id in sorted(nid for nid in nodes if nid not in page_map):
        page_map[orphan_id] = counter
        counter += 1

    return page_map


def find_orphans(nodes: Mapping[str, StoryNode], start_node_id: str) -> list[str]:
    """Return page ids not reachable from the root, sorted.

    When the root is missing every page counts as an orphan.
    """
    if start_node_id not in nodes:
        return sorted(nodes)

    reached = {start_node_id}
    stack = [start_node_id]
    while stack:
        for choice in nodes[stack.pop()].choices:
            target = choice.next_node_id
            if target is not None and target in nodes and target not in reached:
                reached.add(target)
                stack.append(target)
    return sorted(nid for nid in nodes if nid not in reached)
