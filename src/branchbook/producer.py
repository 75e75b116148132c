"""Content producer boundary.

The engine never writes prose itself. When the reader follows an
unexplored choice, the host asks a :class:`ContentProducer` for the next
page, handing it the story so far plus the path's outcome tally and,
once a threshold is reached, the ending the page must deliver.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from branchbook.graph.errors import ChoiceNotFoundError, NodeNotFoundError
from branchbook.graph.scoring import build_parent_map, determine_ending, score_path
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from branchbook.graph.scoring import EndingType, PathScores
    from branchbook.models.story import Choice, ProducedNode, Story, StoryNode

log = get_logger(__name__)


@dataclass(frozen=True)
class ProductionRequest:
    """Everything a producer needs to write the next page.

    Attributes:
        story: Snapshot at the time of the request.
        from_node: Page holding the followed choice.
        choice: The unexplored choice being followed.
        scores: Outcome tally along the root path to ``from_node``.
        ending: Ending the next page must conclude with, or None to continue.
        ending_step: ``(step, length)`` when the page belongs to a forced
            ending sequence; the page at ``step == length`` concludes it.
    """

    story: Story
    from_node: StoryNode
    choice: Choice
    scores: PathScores
    ending: EndingType | None = None
    ending_step: tuple[int, int] | None = None

    @property
    def is_final(self) -> bool:
        if self.ending_step is not None:
            step, length = self.ending_step
            return step >= length
        return self.ending is not None


class ContentProducer(Protocol):
    """Writes new pages for unexplored choices."""

    async def produce(self, request: ProductionRequest) -> ProducedNode:
        """Produce the page reached by ``request.choice``.

        A result with no choices is treated as an ending.
        """
        ...


def build_production_request(
    story: Story,
    from_node_id: str,
    choice_id: str,
    *,
    ending_step: tuple[int, int] | None = None,
) -> ProductionRequest:
    """Score the path to a page and package a producer request.

    The tally covers the edges from the root down to ``from_node_id``. The
    choice being followed is not counted yet.

    Args:
        story: Current snapshot.
        from_node_id: Page holding the choice.
        choice_id: The choice the reader picked.
        ending_step: Position in a forced ending sequence, if any.

    Returns:
        ProductionRequest with scores and ending verdict.

    Raises:
        NodeNotFoundError: If ``from_node_id`` is not in the story.
        ChoiceNotFoundError: If the page has no such choice.
    """
    node = story.nodes.get(from_node_id)
    if node is None:
        raise NodeNotFoundError(
            node_id=from_node_id, available=list(story.nodes), context="production request"
        )
    choice = next((c for c in node.choices if c.id == choice_id), None)
    if choice is None:
        raise ChoiceNotFoundError(
            choice_id=choice_id, node_id=from_node_id, available=[c.id for c in node.choices]
        )

    scores = score_path(story, from_node_id, build_parent_map(story))
    ending = determine_ending(scores, story.ending_thresholds)

    log.debug(
        "production_request_built",
        from_node_id=from_node_id,
        choice_id=choice_id,
        ending=ending,
        ending_step=ending_step,
        **scores.as_dict(),
    )
    return ProductionRequest(
        story=story,
        from_node=node,
        choice=choice,
        scores=scores,
        ending=ending,
        ending_step=ending_step,
    )
