"""Tests for story graph integrity checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from branchbook.graph.errors import GraphCorruptionError
from branchbook.graph.integrity import check_integrity, find_violations
from tests.fixtures.story_fixtures import make_choice, make_node, make_story

if TYPE_CHECKING:
    from branchbook.models import Story


class TestFindViolations:
    def test_clean_story(self, branching_story: Story) -> None:
        assert find_violations(branching_story) == []

    def test_missing_root(self) -> None:
        story = make_story(make_node("A"), start="R")

        assert find_violations(story) == ["start page 'R' does not exist"]

    def test_dangling_target(self) -> None:
        story = make_story(make_node("R", choices=[make_choice("c", "ghost")]))

        violations = find_violations(story)

        assert len(violations) == 1
        assert "ghost" in violations[0]

    def test_duplicate_choice_ids(self) -> None:
        story = make_story(make_node("R", choices=[make_choice("c"), make_choice("c")]))

        assert find_violations(story) == ["page 'R' repeats choice id 'c'"]

    def test_mismatched_key(self) -> None:
        story = make_story(make_node("R"))
        story.nodes["other"] = make_node("not-other")

        assert "page stored under 'other' has id 'not-other'" in find_violations(story)

    def test_missing_ending(self) -> None:
        story = make_story(make_node("R"), endings=["gone"])

        assert find_violations(story) == ["ending 'gone' does not exist"]


class TestCheckIntegrity:
    def test_passes_clean_story(self, cyclic_story: Story) -> None:
        check_integrity(cyclic_story)

    def test_raises_with_all_violations(self) -> None:
        story = make_story(make_node("A", choices=[make_choice("c", "ghost")]), endings=["gone"])

        with pytest.raises(GraphCorruptionError) as exc_info:
            check_integrity(story)

        assert len(exc_info.value.violations) == 3
        assert "3 integrity violation(s)" in str(exc_info.value)
        assert exc_info.value.describe().startswith("Story graph integrity violations:")
