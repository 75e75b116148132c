"""Tests for group-preserving page shuffling."""

from __future__ import annotations

import random
from collections import Counter
from itertools import groupby
from typing import TYPE_CHECKING

import pytest

from branchbook.config import BookConfig, PaginationConfig
from branchbook.export.pages import BackCoverPage, CoverPage, NodePage
from branchbook.export.paginator import layout_pages, physical_page_map
from branchbook.export.shuffle import shuffle_pages
from branchbook.graph.numbering import assign_page_numbers
from tests.fixtures.story_fixtures import make_chain, make_node, make_story

if TYPE_CHECKING:
    from branchbook.export.pages import Page
    from branchbook.models import Story

SMALL_PAGES = BookConfig(pagination=PaginationConfig(illustrated_limit=20, plain_limit=40))


def _layout(story: Story) -> list[Page]:
    return layout_pages(
        story, assign_page_numbers(story.nodes, story.start_node_id), config=SMALL_PAGES
    )


def _node_sequence(pages: list[Page]) -> list[tuple[str, int]]:
    return [(p.node_id, p.chunk_index) for p in pages if isinstance(p, NodePage)]


@pytest.fixture
def long_chain() -> Story:
    """Ten-page chain; every other page spans two printed pages."""
    story = make_chain(10)
    for i in range(0, 10, 2):
        story.nodes[f"P{i}"].text = "word " * 12
    return story


class TestShufflePages:
    @pytest.mark.parametrize("seed", [0, 1, 7, 42, 1234])
    def test_start_group_follows_back_cover(self, long_chain: Story, seed: int) -> None:
        shuffled = shuffle_pages(_layout(long_chain), "P0", rng=random.Random(seed))

        assert isinstance(shuffled[0], CoverPage)
        assert isinstance(shuffled[1], BackCoverPage)
        assert _node_sequence(shuffled)[:2] == [("P0", 0), ("P0", 1)]

    @pytest.mark.parametrize("seed", [0, 1, 7, 42, 1234])
    def test_groups_stay_contiguous_and_ordered(self, long_chain: Story, seed: int) -> None:
        original = _layout(long_chain)
        shuffled = shuffle_pages(original, "P0", rng=random.Random(seed))

        sequence = _node_sequence(shuffled)
        node_ids = [node_id for node_id, _ in groupby(node_id for node_id, _ in sequence)]
        assert len(node_ids) == len(set(node_ids)), "a node's chunks were separated"
        for node_id in node_ids:
            indexes = [idx for nid, idx in sequence if nid == node_id]
            assert indexes == sorted(indexes)

        assert Counter(sequence) == Counter(_node_sequence(original))

    @pytest.mark.parametrize("seed", [0, 1, 7, 42, 1234])
    def test_references_recomputed(self, long_chain: Story, seed: int) -> None:
        shuffled = shuffle_pages(_layout(long_chain), "P0", rng=random.Random(seed))
        first_pages = physical_page_map(shuffled)

        for number, page in enumerate(shuffled, start=1):
            if not isinstance(page, NodePage):
                continue
            for ref in page.choice_refs:
                target = next(c for c in page.node.choices if c.id == ref.choice_id)
                assert ref.page == first_pages[target.next_node_id or ""]
            if page.continued_to is not None:
                following = shuffled[page.continued_to - 1]
                assert isinstance(following, NodePage)
                assert following.node_id == page.node_id
                assert page.continued_to == number + 1

    def test_seed_is_reproducible(self, long_chain: Story) -> None:
        pages = _layout(long_chain)

        first = shuffle_pages(pages, "P0", rng=random.Random(5))
        second = shuffle_pages(pages, "P0", rng=random.Random(5))

        assert _node_sequence(first) == _node_sequence(second)

    def test_input_not_modified(self, long_chain: Story) -> None:
        pages = _layout(long_chain)
        before = list(pages)

        shuffle_pages(pages, "P0", rng=random.Random(3))

        assert pages == before

    def test_small_book_keeps_order(self) -> None:
        """Cover, back cover and one page: nothing to hide."""
        story = make_story(make_node("R"))
        pages = _layout(story)

        assert shuffle_pages(pages, "R", rng=random.Random(0)) == pages

    def test_custom_minimum(self, long_chain: Story) -> None:
        pages = _layout(long_chain)

        assert shuffle_pages(pages, "P0", min_pages=100) == pages

    def test_unknown_start_keeps_order(self, long_chain: Story) -> None:
        pages = _layout(long_chain)

        assert shuffle_pages(pages, "nope", rng=random.Random(0)) == pages
