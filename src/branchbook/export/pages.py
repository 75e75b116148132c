"""Printable page types.

A laid-out book is a flat list of pages: the cover, the back cover, then
one or more pages per story page. Physical page numbers are 1-based
positions in that list, so the cover is page 1 and the back cover page 2.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from branchbook.models.story import StoryNode


@dataclass(frozen=True)
class CoverPage:
    """Title and cover artwork."""

    title: str
    image_url: str = ""
    kind: Literal["cover"] = "cover"


@dataclass(frozen=True)
class BackCoverPage:
    """Story prompt or summary."""

    prompt: str
    kind: Literal["back_cover"] = "back_cover"


@dataclass(frozen=True)
class ChoiceReference:
    """A choice as printed: its label and the page to turn to.

    ``page`` is None when the choice is unexplored or its target is not in
    the book; renderers print a placeholder for it.
    """

    choice_id: str
    text: str
    page: int | None = None


@dataclass(frozen=True)
class NodePage:
    """One physical page holding a chunk of a story page's text.

    Attributes:
        node: The story page this chunk belongs to.
        chunk: Raw chunk text; chunks of one node joined in order give
            the node's full text.
        chunk_index: Position of this chunk within the node (0-based).
        chunk_count: Number of chunks the node was split into.
        is_ending: Whether the node is flagged as an ending.
        continued_from: Physical page of the previous chunk, if any.
        continued_to: Physical page of the next chunk, if any.
        choice_refs: Printed choices; only set on the last chunk of a
            non-ending node.
    """

    node: StoryNode
    chunk: str
    chunk_index: int = 0
    chunk_count: int = 1
    is_ending: bool = False
    continued_from: int | None = None
    continued_to: int | None = None
    choice_refs: tuple[ChoiceReference, ...] = ()
    kind: Literal["node"] = "node"

    @property
    def node_id(self) -> str:
        return self.node.id

    @property
    def is_first_chunk(self) -> bool:
        return self.chunk_index == 0

    @property
    def is_last_chunk(self) -> bool:
        return self.chunk_index == self.chunk_count - 1

    @property
    def shows_illustration(self) -> bool:
        """Artwork prints on the first chunk only."""
        return self.is_first_chunk and bool(self.node.illustration_url)


Page = CoverPage | BackCoverPage | NodePage
