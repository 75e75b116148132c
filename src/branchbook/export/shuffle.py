"""Group-preserving page shuffle.

Shuffling hides the story's structure from a reader flipping through the
printed book. All physical pages of one story page move as a group and
keep their internal order. The start page's group is pinned right after
the back cover so the reader always knows where to begin.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from branchbook.config import DEFAULT_SHUFFLE_MIN_PAGES
from branchbook.export.pages import NodePage
from branchbook.export.paginator import number_pages
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from branchbook.export.pages import Page

log = get_logger(__name__)


def shuffle_pages(
    pages: Sequence[Page],
    start_node_id: str,
    *,
    rng: random.Random | None = None,
    min_pages: int = DEFAULT_SHUFFLE_MIN_PAGES,
) -> list[Page]:
    """Randomly reorder page groups, keeping the start group first.

    Args:
        pages: Laid-out pages (cover and back cover first).
        start_node_id: Root page id; its group stays in front.
        rng: Random source; a fresh ``random.Random()`` when omitted.
        min_pages: Books with fewer pages are returned in their original
            order.

    Returns:
        Reordered pages with cross-references recomputed for the new
        positions. The original order is kept when the book is too small
        or the start page has no printed pages.
    """
    if len(pages) < min_pages:
        log.debug("shuffle_skipped_too_few_pages", pages=len(pages), min_pages=min_pages)
        return number_pages(pages)

    front: list[Page] = []
    groups: dict[str, list[Page]] = {}
    for page in pages:
        if isinstance(page, NodePage):
            groups.setdefault(page.node_id, []).append(page)
        else:
            front.append(page)

    start_group = groups.pop(start_node_id, None)
    if start_group is None:
        log.warning("shuffle_skipped_missing_start", start_node_id=start_node_id)
        return number_pages(pages)

    others = list(groups.values())
    (rng or random.Random()).shuffle(others)

    shuffled: list[Page] = [*front, *start_group]
    for group in others:
        shuffled.extend(group)

    log.debug("pages_shuffled", groups=len(others) + 1, pages=len(shuffled))
    return number_pages(shuffled)
