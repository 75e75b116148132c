"""Controlled mutations of a story graph.

Every function takes a story snapshot and returns a new one; the input is
never modified. Hosts replace their snapshot with the result, which keeps
each edit atomic: a failed call leaves the previous snapshot intact.

Addressing a page or choice that does not exist raises
:class:`NodeNotFoundError` or :class:`ChoiceNotFoundError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

from branchbook.graph.errors import ChoiceNotFoundError, NodeNotFoundError
from branchbook.models.story import Choice, EndingThresholds, Story, StoryNode
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from branchbook.models.story import ProducedChoice, ProducedNode

log = get_logger(__name__)

MANUAL_CHOICE_RATIONALE = "This choice was added manually."


def new_node_id() -> str:
    """Mint a unique page id."""
    return f"node_{uuid4().hex[:12]}"


def new_choice_id() -> str:
    """Mint a unique choice id."""
    return f"choice_{uuid4().hex[:12]}"


def wrap_choices(produced: Sequence[ProducedChoice]) -> list[Choice]:
    """Wrap producer choices as fresh, unexplored stubs with new ids."""
    return [
        Choice(
            id=new_choice_id(),
            text=c.text,
            next_node_id=None,
            is_chosen=False,
            outcome_category=c.outcome_category,
            outcome_rationale=c.outcome_rationale,
        )
        for c in produced
    ]


def new_story(
    produced: ProducedNode,
    *,
    title: str = "",
    prompt: str = "",
    art_style: str = "",
    cover_image_url: str = "",
    thresholds: EndingThresholds | None = None,
) -> Story:
    """Start a story from the producer's opening scene.

    Args:
        produced: Opening page text and choices.
        title: Book title.
        prompt: Story prompt, printed on the back cover.
        art_style: Art style used for illustrations.
        cover_image_url: Cover artwork reference.
        thresholds: Ending thresholds; defaults to 3/3/3.

    Returns:
        One-page story whose root is the opening scene.
    """
    start_id = new_node_id()
    story = Story(
        nodes={
            start_id: StoryNode(
                id=start_id, text=produced.text, choices=wrap_choices(produced.choices)
            )
        },
        start_node_id=start_id,
        ending_thresholds=thresholds or EndingThresholds(),
        title=title,
        prompt=prompt,
        art_style=art_style,
        cover_image_url=cover_image_url,
    )
    log.debug("story_created", start_node_id=start_id, choices=len(produced.choices))
    return story


def _node(story: Story, node_id: str, context: str) -> StoryNode:
    node = story.nodes.get(node_id)
    if node is None:
        raise NodeNotFoundError(node_id=node_id, available=list(story.nodes), context=context)
    return node


def _choice(node: StoryNode, choice_id: str) -> Choice:
    for choice in node.choices:
        if choice.id == choice_id:
            return choice
    raise ChoiceNotFoundError(
        choice_id=choice_id,
        node_id=node.id,
        available=[c.id for c in node.choices],
    )


def fold_produced_node(
    story: Story,
    from_node_id: str,
    choice_id: str,
    produced: ProducedNode,
    *,
    terminal: bool | None = None,
    node_id: str | None = None,
) -> tuple[Story, str]:
    """Fold a producer result into the story as one atomic edit.

    Adds the new page, points the originating choice at it and marks that
    choice explored, and flags the page as an ending when it is terminal.

    Args:
        story: Current snapshot.
        from_node_id: Page holding the choice that was followed.
        choice_id: The choice being resolved.
        produced: Producer output for the new page.
        terminal: Whether the new page is an ending. When None, a page with
            no choices is an ending.
        node_id: Id for the new page; minted when omitted.

    Returns:
        Tuple of (new snapshot, new page id).

    Raises:
        ValueError: If the choice already leads to an existing page, or
            ``node_id`` is taken.
    """
    updated = story.model_copy(deep=True)
    choice = _choice(_node(updated, from_node_id, "fold origin"), choice_id)
    if choice.next_node_id is not None and choice.next_node_id in updated.nodes:
        msg = (
            f"Choice '{choice_id}' on page '{from_node_id}' already leads to "
            f"page '{choice.next_node_id}'"
        )
        raise ValueError(msg)

    new_id = node_id or new_node_id()
    if new_id in updated.nodes:
        msg = f"Page id '{new_id}' already exists"
        raise ValueError(msg)

    updated.nodes[new_id] = StoryNode(
        id=new_id, text=produced.text, choices=wrap_choices(produced.choices)
    )
    choice.next_node_id = new_id
    choice.is_chosen = True

    is_terminal = terminal if terminal is not None else not produced.choices
    if is_terminal:
        updated.end_node_ids.append(new_id)

    log.info(
        "node_folded",
        node_id=new_id,
        from_node_id=from_node_id,
        choice_id=choice_id,
        terminal=is_terminal,
    )
    return updated, new_id


def follow_choice(story: Story, node_id: str, choice_id: str) -> Story:
    """Mark a choice as explored."""
    updated = story.model_copy(deep=True)
    _choice(_node(updated, node_id, "follow choice"), choice_id).is_chosen = True
    return updated


def add_choice(
    story: Story,
    node_id: str,
    text: str,
    *,
    choice_id: str | None = None,
    rationale: str = MANUAL_CHOICE_RATIONALE,
) -> tuple[Story, str]:
    """Append a manually written choice stub to a page.

    Manual choices carry the "none" outcome category, so they never count
    towards an ending.

    Returns:
        Tuple of (new snapshot, new choice id).
    """
    updated = story.model_copy(deep=True)
    node = _node(updated, node_id, "add choice")
    new_id = choice_id or new_choice_id()
    node.choices.append(
        Choice(
            id=new_id,
            text=text,
            outcome_category="none",
            outcome_rationale=rationale,
        )
    )
    return updated, new_id


def remove_choice(story: Story, node_id: str, choice_id: str) -> Story:
    """Remove a choice from a page.

    The target page, if any, is kept; it may become an orphan.
    """
    updated = story.model_copy(deep=True)
    node = _node(updated, node_id, "remove choice")
    _choice(node, choice_id)
    node.choices = [c for c in node.choices if c.id != choice_id]
    return updated


def replace_choices(story: Story, node_id: str, produced: Sequence[ProducedChoice]) -> Story:
    """Replace a page's choices with a regenerated set of stubs."""
    updated = story.model_copy(deep=True)
    node = _node(updated, node_id, "replace choices")
    dropped = sum(1 for c in node.choices if c.next_node_id is not None)
    node.choices = wrap_choices(produced)
    if dropped:
        log.info("resolved_choices_replaced", node_id=node_id, dropped=dropped)
    return updated


def edit_node_text(story: Story, node_id: str, text: str) -> Story:
    updated = story.model_copy(deep=True)
    _node(updated, node_id, "edit text").text = text
    return updated


def set_illustration(story: Story, node_id: str, illustration_url: str) -> Story:
    updated = story.model_copy(deep=True)
    _node(updated, node_id, "set illustration").illustration_url = illustration_url
    return updated


def clear_illustration(story: Story, node_id: str) -> Story:
    updated = story.model_copy(deep=True)
    _node(updated, node_id, "clear illustration").illustration_url = None
    return updated


def set_art_style(story: Story, art_style: str) -> Story:
    """Change the art style used for new illustrations."""
    updated = story.model_copy(deep=True)
    updated.art_style = art_style
    return updated


def mark_as_ending(story: Story, node_id: str) -> Story:
    """Flag a page as an ending. Flagging twice is a no-op."""
    updated = story.model_copy(deep=True)
    _node(updated, node_id, "mark ending")
    if node_id not in updated.end_node_ids:
        updated.end_node_ids.append(node_id)
    return updated


def set_ending_thresholds(
    story: Story,
    *,
    good: int | None = None,
    bad: int | None = None,
    mixed: int | None = None,
) -> Story:
    """Change ending thresholds; omitted categories keep their value.

    Raises:
        ValueError: If a supplied threshold is below 1.
    """
    requested = {"good": good, "bad": bad, "mixed": mixed}
    changes = {k: v for k, v in requested.items() if v is not None}
    for category, value in changes.items():
        if value < 1:
            msg = f"Ending threshold for '{category}' must be at least 1, got {value}"
            raise ValueError(msg)

    updated = story.model_copy(deep=True)
    updated.ending_thresholds = updated.ending_thresholds.model_copy(update=changes)
    return updated
