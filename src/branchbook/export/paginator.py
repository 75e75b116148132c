"""Book layout: text splitting and cross-reference numbering.

Layout happens in three steps:
1. Order story pages by their logical page number.
2. Split each page's text into chunks that fit one printed page.
3. Number the flat page list and resolve every "turn to page N" and
   "continued on page N" reference from the final positions.

Step 3 is :func:`number_pages`. It runs again after any reordering (see
``shuffle_pages``), because one logical page may expand into several
physical ones and shuffling moves them.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from branchbook.config import BookConfig
from branchbook.export.pages import BackCoverPage, ChoiceReference, CoverPage, NodePage
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from branchbook.export.pages import Page
    from branchbook.models.story import Story

log = get_logger(__name__)

UNRESOLVED_MARKER = "???"


def split_text(text: str, limit: int, *, min_fraction: float = 0.5) -> list[str]:
    """Split text greedily into chunks of at most ``limit`` characters.

    Chunks are contiguous slices of ``text``: joining them gives the
    original back exactly. Each cut lands on a word boundary, at the
    latest one inside the window. If that boundary is closer to the start
    of the window than ``min_fraction * limit`` (or there is none), the
    text is cut hard at ``limit`` characters.

    Args:
        text: Text to split.
        limit: Maximum characters per chunk.
        min_fraction: Shortest acceptable word-boundary chunk, as a
            fraction of ``limit``.

    Returns:
        At least one chunk. Text within the limit yields a single chunk.

    Raises:
        ValueError: If ``limit`` is less than 1.
    """
    if limit < 1:
        msg = f"limit must be at least 1, got {limit}"
        raise ValueError(msg)

    chunks: list[str] = []
    start = 0
    min_length = min_fraction * limit
    while len(text) - start > limit:
        window_end = start + limit
        cut = _boundary_before(text, start, window_end)
        if cut is None or cut - start < min_length:
            cut = window_end
        chunks.append(text[start:cut])
        start = cut
    chunks.append(text[start:])
    return chunks


def _boundary_before(text: str, start: int, window_end: int) -> int | None:
    """Latest word boundary in ``text[start:window_end]``, as a cut index."""
    if text[window_end].isspace():
        return window_end
    for i in range(window_end - 1, start - 1, -1):
        if text[i].isspace():
            return i + 1
    return None


def physical_page_map(pages: Sequence[Page]) -> dict[str, int]:
    """Map node id to the physical page number of its first chunk."""
    first_pages: dict[str, int] = {}
    for index, page in enumerate(pages):
        if isinstance(page, NodePage) and page.is_first_chunk:
            first_pages.setdefault(page.node_id, index + 1)
    return first_pages


def number_pages(pages: Sequence[Page]) -> list[Page]:
    """Resolve cross-references from final page positions.

    Sets on every node page:
        - ``continued_from`` / ``continued_to``: physical pages of the
          neighbouring chunks of the same node.
        - ``choice_refs`` (last chunk of a non-ending node only): each
          choice's target page, or None for stubs and targets not laid out.

    Args:
        pages: Pages in their final order.

    Returns:
        New list of pages with references filled in.
    """
    first_pages = physical_page_map(pages)
    chunk_pages: dict[tuple[str, int], int] = {}
    for index, page in enumerate(pages):
        if isinstance(page, NodePage):
            chunk_pages[(page.node_id, page.chunk_index)] = index + 1

    numbered: list[Page] = []
    for page in pages:
        if not isinstance(page, NodePage):
            numbered.append(page)
            continue

        refs: tuple[ChoiceReference, ...] = ()
        if page.is_last_chunk and not page.is_ending:
            refs = tuple(
                ChoiceReference(
                    choice_id=choice.id,
                    text=choice.text,
                    page=first_pages.get(choice.next_node_id) if choice.next_node_id else None,
                )
                for choice in page.node.choices
            )

        numbered.append(
            replace(
                page,
                continued_from=chunk_pages.get((page.node_id, page.chunk_index - 1)),
                continued_to=chunk_pages.get((page.node_id, page.chunk_index + 1)),
                choice_refs=refs,
            )
        )
    return numbered


def layout_pages(
    story: Story,
    logical_page_map: dict[str, int],
    *,
    config: BookConfig | None = None,
) -> list[Page]:
    """Lay out the whole book as a numbered page sequence.

    Args:
        story: Story to lay out.
        logical_page_map: Node id to logical page number, see
            ``assign_page_numbers``. Nodes missing from it are left out.
        config: Pagination limits; defaults apply when omitted.

    Returns:
        Cover, back cover, then each node's chunks in logical order, with
        cross-references resolved. Empty when the root page is missing.
    """
    if not story.has_start():
        log.warning("layout_skipped_missing_start", start_node_id=story.start_node_id)
        return []

    pagination = (config or BookConfig()).pagination
    pages: list[Page] = [
        CoverPage(title=story.title, image_url=story.cover_image_url),
        BackCoverPage(prompt=story.prompt),
    ]

    for node_id, _number in sorted(logical_page_map.items(), key=lambda item: item[1]):
        node = story.nodes.get(node_id)
        if node is None:
            continue
        limit = pagination.limit_for(bool(node.illustration_url))
        chunks = split_text(node.text, limit, min_fraction=pagination.min_split_fraction)
        is_ending = story.is_ending(node_id)
        for index, chunk in enumerate(chunks):
            pages.append(
                NodePage(
                    node=node,
                    chunk=chunk,
                    chunk_index=index,
                    chunk_count=len(chunks),
                    is_ending=is_ending,
                )
            )

    log.debug("layout_complete", nodes=len(logical_page_map), pages=len(pages))
    return number_pages(pages)


def page_text(page: NodePage, ui: dict[str, str]) -> str:
    """Chunk text with continuation markers for printing."""
    text = page.chunk.strip()
    if page.continued_from is not None:
        text = f"({ui['continued_from']} {page.continued_from})...\n\n{text}"
    if page.continued_to is not None:
        text = f"{text}\n\n...({ui['continued_on']} {page.continued_to})"
    return text


def choice_target_label(ref: ChoiceReference) -> str:
    return str(ref.page) if ref.page is not None else UNRESOLVED_MARKER
