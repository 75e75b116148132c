"""Interactive authoring session.

A :class:`StorySession` owns the current story snapshot and the reader's
position in it. All edits go through the session, one at a time: while a
producer call is pending, further navigation is refused rather than
queued, so two folds can never race on the same snapshot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from branchbook.graph.errors import ChoiceNotFoundError, NodeNotFoundError
from branchbook.graph.mutations import add_choice, fold_produced_node, follow_choice
from branchbook.graph.numbering import assign_page_numbers
from branchbook.graph.pruning import delete_node
from branchbook.observability.logging import get_logger
from branchbook.producer import build_production_request

if TYPE_CHECKING:
    from branchbook.models.story import Story, StoryNode
    from branchbook.producer import ContentProducer

log = get_logger(__name__)

ENDING_PATH_LENGTH = 3
ENDING_PATH_RATIONALE = "This choice begins the final sequence of the story."


class SessionBusyError(RuntimeError):
    """Raised when an edit is requested while a producer call is pending."""

    def __init__(self, pending: str) -> None:
        self.pending = pending
        super().__init__(f"Session is busy producing a page ({pending})")


class StorySession:
    """Holds a story and the page currently being read.

    Attributes:
        story: Current snapshot. Replaced, never mutated, by each edit.
        current_node_id: Page the reader is on.
    """

    def __init__(self, story: Story, producer: ContentProducer) -> None:
        self.story = story
        self.producer = producer
        self.current_node_id = story.start_node_id
        self._pending: str | None = None
        self._page_numbers: dict[str, int] | None = None

    @property
    def busy(self) -> bool:
        return self._pending is not None

    @property
    def current_node(self) -> StoryNode:
        return self.story.nodes[self.current_node_id]

    def page_numbers(self) -> dict[str, int]:
        """Logical page numbers for the current snapshot.

        Cached until the next structural change.
        """
        if self._page_numbers is None:
            self._page_numbers = assign_page_numbers(self.story.nodes, self.story.start_node_id)
        return self._page_numbers

    def _replace(self, story: Story) -> None:
        self.story = story
        self._page_numbers = None

    def _ensure_idle(self) -> None:
        if self._pending is not None:
            raise SessionBusyError(self._pending)

    async def navigate(self, choice_id: str) -> str:
        """Follow a choice from the current page.

        A resolved choice is followed directly and marked explored. An
        unexplored choice is sent to the producer once, and the result is
        folded in as a single edit. If the producer fails, the story is
        left exactly as it was and the error propagates.

        Args:
            choice_id: Choice on the current page.

        Returns:
            Id of the page now being read.

        Raises:
            SessionBusyError: If a producer call is already pending.
            ChoiceNotFoundError: If the current page has no such choice.
        """
        self._ensure_idle()
        node = self.current_node
        choice = next((c for c in node.choices if c.id == choice_id), None)
        if choice is None:
            raise ChoiceNotFoundError(
                choice_id=choice_id, node_id=node.id, available=[c.id for c in node.choices]
            )

        if choice.next_node_id is not None and choice.next_node_id in self.story.nodes:
            self.story = follow_choice(self.story, node.id, choice_id)
            self.current_node_id = choice.next_node_id
            log.debug("choice_followed", node_id=node.id, target=self.current_node_id)
            return self.current_node_id

        request = build_production_request(self.story, node.id, choice_id)
        self._pending = choice_id
        try:
            produced = await self.producer.produce(request)
        finally:
            self._pending = None

        # A forced ending is terminal even if the producer offered choices
        updated, new_id = fold_produced_node(
            request.story,
            node.id,
            choice_id,
            produced,
            terminal=True if request.is_final else None,
        )
        self._replace(updated)
        self.current_node_id = new_id
        return new_id

    async def generate_ending_path(
        self,
        from_node_id: str,
        choice_text: str,
        *,
        length: int = ENDING_PATH_LENGTH,
    ) -> str:
        """Write a short chain of pages that brings a branch to its end.

        A new choice is added to ``from_node_id`` and the producer is asked
        for up to ``length`` pages in a row, each reached by the first
        choice of the page before. The last page is always an ending and
        keeps no choices; a page produced without choices ends the chain
        early. All pages are committed together, so a producer failure
        part way leaves the story exactly as it was.

        Args:
            from_node_id: Page the ending sequence starts from.
            choice_text: Text of the choice that begins the sequence.
            length: Number of pages to produce.

        Returns:
            Id of the ending page, which the reader is moved to.

        Raises:
            SessionBusyError: If a producer call is already pending.
            NodeNotFoundError: If ``from_node_id`` does not exist.
            ValueError: If ``length`` is below 1.
        """
        self._ensure_idle()
        if length < 1:
            msg = f"Ending path length must be at least 1, got {length}"
            raise ValueError(msg)

        draft, choice_id = add_choice(
            self.story, from_node_id, choice_text, rationale=ENDING_PATH_RATIONALE
        )
        node_id = from_node_id
        self._pending = f"ending path from {from_node_id}"
        try:
            for step in range(1, length + 1):
                request = build_production_request(
                    draft, node_id, choice_id, ending_step=(step, length)
                )
                produced = await self.producer.produce(request)
                if request.is_final:
                    produced = produced.model_copy(update={"choices": []})
                draft, node_id = fold_produced_node(
                    draft, node_id, choice_id, produced, terminal=not produced.choices
                )
                if not produced.choices:
                    break
                choice_id = draft.nodes[node_id].choices[0].id
        finally:
            self._pending = None

        self._replace(draft)
        self.current_node_id = node_id
        log.info("ending_path_generated", from_node_id=from_node_id, ending_node_id=node_id)
        return node_id

    def jump_to(self, node_id: str) -> None:
        """Move the reader to any page in the story.

        Raises:
            NodeNotFoundError: If the page does not exist.
        """
        if node_id not in self.story.nodes:
            raise NodeNotFoundError(
                node_id=node_id, available=list(self.story.nodes), context="jump"
            )
        self.current_node_id = node_id

    def delete_page(self, node_id: str) -> bool:
        """Delete a page and its descendants.

        The root is never deleted. If the reader's page is removed, the
        reader returns to the root.

        Returns:
            True when anything was deleted.

        Raises:
            SessionBusyError: If a producer call is pending.
        """
        self._ensure_idle()
        updated = delete_node(self.story, node_id)
        if len(updated.nodes) == len(self.story.nodes):
            return False

        self._replace(updated)
        if self.current_node_id not in updated.nodes:
            self.current_node_id = updated.start_node_id
        return True
