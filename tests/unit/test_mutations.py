"""Tests for controlled story mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from branchbook.graph.errors import ChoiceNotFoundError, NodeNotFoundError
from branchbook.graph.mutations import (
    MANUAL_CHOICE_RATIONALE,
    add_choice,
    clear_illustration,
    edit_node_text,
    fold_produced_node,
    follow_choice,
    mark_as_ending,
    new_story,
    remove_choice,
    replace_choices,
    set_ending_thresholds,
    set_art_style,
    set_illustration,
    wrap_choices,
)
from branchbook.models import EndingThresholds, ProducedChoice, ProducedNode
from tests.fixtures.story_fixtures import make_choice, make_node, make_story

if TYPE_CHECKING:
    from branchbook.models import Story


def _produced(*choice_texts: str) -> ProducedNode:
    return ProducedNode(
        text="A new scene unfolds.",
        choices=[
            ProducedChoice(text=t, outcome_category="good", outcome_rationale="Seems wise.")
            for t in choice_texts
        ],
    )


class TestWrapChoices:
    def test_fresh_unexplored_stubs(self) -> None:
        choices = wrap_choices(_produced("Run", "Hide").choices)

        assert [c.text for c in choices] == ["Run", "Hide"]
        assert all(c.next_node_id is None and not c.is_chosen for c in choices)
        assert len({c.id for c in choices}) == 2

    def test_default_rationale(self) -> None:
        choices = wrap_choices([ProducedChoice(text="Wait")])

        assert choices[0].outcome_category == "none"
        assert choices[0].outcome_rationale == "No rationale provided."


class TestNewStory:
    def test_single_root_page(self) -> None:
        story = new_story(_produced("Enter", "Leave"), title="Cave", prompt="A cave.")

        assert list(story.nodes) == [story.start_node_id]
        root = story.nodes[story.start_node_id]
        assert root.text == "A new scene unfolds."
        assert len(root.choices) == 2
        assert story.end_node_ids == []
        assert story.title == "Cave"

    def test_custom_thresholds(self) -> None:
        story = new_story(_produced("Go"), thresholds=EndingThresholds(good=1, bad=2, mixed=4))

        assert story.ending_thresholds.mixed == 4


class TestFoldProducedNode:
    def test_links_new_page(self, cyclic_story: Story) -> None:
        updated, new_id = fold_produced_node(cyclic_story, "R", "C1", _produced("Onwards"))

        c1 = updated.nodes["R"].choices[0]
        assert c1.next_node_id == new_id
        assert c1.is_chosen is True
        assert updated.nodes[new_id].choices[0].text == "Onwards"
        assert new_id not in updated.end_node_ids

    def test_page_without_choices_is_ending(self, cyclic_story: Story) -> None:
        updated, new_id = fold_produced_node(cyclic_story, "R", "C1", _produced())

        assert updated.end_node_ids == [new_id]

    def test_explicit_terminal(self, cyclic_story: Story) -> None:
        updated, new_id = fold_produced_node(
            cyclic_story, "R", "C1", _produced("More"), terminal=True
        )

        assert new_id in updated.end_node_ids

    def test_explicit_node_id(self, cyclic_story: Story) -> None:
        updated, new_id = fold_produced_node(
            cyclic_story, "R", "C1", _produced("x"), node_id="N3"
        )

        assert new_id == "N3"
        assert "N3" in updated.nodes

    def test_duplicate_node_id_rejected(self, cyclic_story: Story) -> None:
        with pytest.raises(ValueError, match="already exists"):
            fold_produced_node(cyclic_story, "R", "C1", _produced(), node_id="N2")

    def test_resolved_choice_not_overwritten(self, cyclic_story: Story) -> None:
        with pytest.raises(ValueError, match="already leads to page 'N2'"):
            fold_produced_node(cyclic_story, "R", "C2", _produced())

    def test_dangling_choice_can_be_refolded(self) -> None:
        story = make_story(make_node("R", choices=[make_choice("c", "ghost")]))

        updated, new_id = fold_produced_node(story, "R", "c", _produced())

        assert updated.nodes["R"].choices[0].next_node_id == new_id

    def test_unknown_choice(self, cyclic_story: Story) -> None:
        with pytest.raises(ChoiceNotFoundError) as exc_info:
            fold_produced_node(cyclic_story, "R", "C9", _produced())

        assert "C1" in exc_info.value.describe()

    def test_unknown_origin(self, cyclic_story: Story) -> None:
        with pytest.raises(NodeNotFoundError):
            fold_produced_node(cyclic_story, "nope", "C1", _produced())

    def test_input_not_modified(self, cyclic_story: Story) -> None:
        before = cyclic_story.model_dump()

        fold_produced_node(cyclic_story, "R", "C1", _produced("a"))

        assert cyclic_story.model_dump() == before


class TestChoiceEdits:
    def test_follow_choice_marks_explored(self, branching_story: Story) -> None:
        story = branching_story.model_copy(deep=True)
        story.nodes["R"].choices[0].is_chosen = False

        updated = follow_choice(story, "R", "r_a")

        assert updated.nodes["R"].choices[0].is_chosen is True

    def test_add_manual_choice(self, branching_story: Story) -> None:
        updated, choice_id = add_choice(branching_story, "C", "Try again")

        choice = updated.nodes["C"].choices[-1]
        assert choice.id == choice_id
        assert choice.outcome_category == "none"
        assert choice.outcome_rationale == MANUAL_CHOICE_RATIONALE
        assert choice.next_node_id is None

    def test_remove_choice_keeps_target(self, branching_story: Story) -> None:
        updated = remove_choice(branching_story, "R", "r_a")

        assert [c.id for c in updated.nodes["R"].choices] == ["r_b"]
        assert "A" in updated.nodes

    def test_remove_unknown_choice(self, branching_story: Story) -> None:
        with pytest.raises(ChoiceNotFoundError):
            remove_choice(branching_story, "R", "missing")

    def test_replace_choices(self, branching_story: Story) -> None:
        updated = replace_choices(branching_story, "B", _produced("Left", "Right", "Back").choices)

        assert [c.text for c in updated.nodes["B"].choices] == ["Left", "Right", "Back"]
        assert all(c.next_node_id is None for c in updated.nodes["B"].choices)


class TestPageEdits:
    def test_edit_text(self, branching_story: Story) -> None:
        updated = edit_node_text(branching_story, "A", "Rewritten.")

        assert updated.nodes["A"].text == "Rewritten."
        assert branching_story.nodes["A"].text == "Text of A."

    def test_illustration_set_and_clear(self, branching_story: Story) -> None:
        illustrated = set_illustration(branching_story, "A", "images/a.png")
        cleared = clear_illustration(illustrated, "A")

        assert illustrated.nodes["A"].illustration_url == "images/a.png"
        assert cleared.nodes["A"].illustration_url is None

    def test_unknown_page_suggests_close_match(self, branching_story: Story) -> None:
        with pytest.raises(NodeNotFoundError) as exc_info:
            edit_node_text(branching_story.model_copy(deep=True), "a", "x")

        assert exc_info.value.node_id == "a"
        assert "does not exist" in exc_info.value.describe()

    def test_set_art_style(self, branching_story: Story) -> None:
        updated = set_art_style(branching_story, "watercolor")

        assert updated.art_style == "watercolor"
        assert branching_story.art_style == ""

    def test_mark_as_ending_is_idempotent(self, branching_story: Story) -> None:
        once = mark_as_ending(branching_story, "B")
        twice = mark_as_ending(once, "B")

        assert twice.end_node_ids == ["C", "D", "B"]


class TestSetEndingThresholds:
    def test_partial_update(self, branching_story: Story) -> None:
        updated = set_ending_thresholds(branching_story, bad=5)

        assert updated.ending_thresholds == EndingThresholds(good=3, bad=5, mixed=3)

    def test_rejects_zero(self, branching_story: Story) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            set_ending_thresholds(branching_story, good=0)
