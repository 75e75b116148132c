"""Build an ExportContext from a story.

Runs the full layout pipeline: logical numbering, pagination, and an
optional shuffle.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from branchbook.config import BookConfig
from branchbook.export.base import ExportContext
from branchbook.export.paginator import layout_pages
from branchbook.export.shuffle import shuffle_pages
from branchbook.graph.numbering import assign_page_numbers

if TYPE_CHECKING:
    from branchbook.models.story import Story


def build_export_context(
    story: Story,
    *,
    config: BookConfig | None = None,
    shuffle: bool = False,
    seed: int | None = None,
) -> ExportContext:
    """Lay out a story for export.

    Args:
        story: Story snapshot to export.
        config: Layout settings; defaults apply when omitted.
        shuffle: Shuffle page groups after layout.
        seed: Shuffle seed; falls back to ``config.shuffle.seed``.

    Returns:
        ExportContext with the final page sequence.

    Raises:
        ValueError: If the story's start page is missing.
    """
    if not story.has_start():
        msg = f"Start page '{story.start_node_id}' is missing; nothing to export"
        raise ValueError(msg)

    config = config or BookConfig()
    page_map = assign_page_numbers(story.nodes, story.start_node_id)
    pages = layout_pages(story, page_map, config=config)

    if shuffle:
        effective_seed = seed if seed is not None else config.shuffle.seed
        pages = shuffle_pages(
            pages,
            story.start_node_id,
            rng=random.Random(effective_seed),
            min_pages=config.shuffle.min_pages,
        )

    return ExportContext(story=story, pages=pages, language=config.language, shuffled=shuffle)
