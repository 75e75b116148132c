"""Tests for the story map outline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from branchbook.graph.numbering import assign_page_numbers
from branchbook.graph.outline import build_outline, render_outline, snippet
from tests.fixtures.story_fixtures import make_chain, make_choice, make_node, make_story

if TYPE_CHECKING:
    from rich.tree import Tree

    from branchbook.graph.outline import OutlineEntry
    from branchbook.models import Story


def _outline(story: Story) -> OutlineEntry:
    entry = build_outline(story, assign_page_numbers(story.nodes, story.start_node_id))
    assert entry is not None
    return entry


def _render(tree: Tree) -> str:
    console = Console(width=120, record=True, color_system=None)
    console.print(tree)
    return console.export_text()


class TestSnippet:
    def test_short_text_unchanged(self) -> None:
        assert snippet("Short.") == "Short."

    def test_long_text_truncated(self) -> None:
        text = "x" * 100

        assert snippet(text) == "x" * 70 + "..."


class TestBuildOutline:
    def test_missing_root(self, branching_story: Story) -> None:
        story = branching_story.model_copy(update={"start_node_id": "nope"})

        assert build_outline(story, {}) is None

    def test_cycle_becomes_leaf(self, cyclic_story: Story) -> None:
        root = _outline(cyclic_story)

        assert root.is_start
        stub, branch = root.choices
        assert stub.target.kind == "stub"
        assert branch.target.node_id == "N2"
        back = branch.target.choices[0].target
        assert back.kind == "cycle"
        assert back.page_number == 1

    def test_convergent_page_expanded_per_branch(self, branching_story: Story) -> None:
        root = _outline(branching_story)

        via_a = root.choices[0].target.choices[1].target
        via_b = root.choices[1].target.choices[0].target
        assert via_a.node_id == via_b.node_id == "D"
        assert via_a.kind == via_b.kind == "page"
        assert via_a.is_ending

    def test_dangling_target(self) -> None:
        story = make_story(make_node("R", choices=[make_choice("c", "ghost")]))

        assert _outline(story).choices[0].target.kind == "missing"


    def test_long_chain(self) -> None:
        story = make_chain(1500)

        entry = _outline(story)
        depth = 1
        while entry.choices:
            entry = entry.choices[0].target
            depth += 1

        assert depth == 1500
        assert entry.node_id == "P1499"
        assert entry.page_number == 1500


class TestRenderOutline:
    def test_labels(self, cyclic_story: Story) -> None:
        text = _render(render_outline(_outline(cyclic_story), current_node_id="N2"))

        assert "Page 1 (start)" in text
        assert "Page 2 <- you are here" in text
        assert "(Leads to an unwritten page)" in text
        assert "(Cycle, jumps back to page 1)" in text

    def test_ending_and_dead_end(self, branching_story: Story) -> None:
        story = branching_story.model_copy(deep=True)
        story.end_node_ids = ["C"]

        text = _render(render_outline(_outline(story)))

        assert "This is an ending." in text
        assert "No choices from this page." in text

    def test_long_chain_renders(self) -> None:
        tree = render_outline(_outline(make_chain(1500)))

        depth = 0
        while tree.children:
            tree = tree.children[0]
            depth += 1

        # A choice level and a page level per edge, then the dead-end note
        assert depth == 2 * 1499 + 1
        assert "No choices from this page." in str(tree.label)

    def test_markup_in_text_is_escaped(self) -> None:
        story = make_story(make_node("R", text="A [bold]sign[/bold] reads"))

        text = _render(render_outline(_outline(story)))

        assert "[bold]sign[/bold]" in text
