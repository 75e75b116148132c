"""Tests for building export contexts and the exporter registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from branchbook.config import BookConfig, ShuffleConfig
from branchbook.export import (
    EXPORT_FORMATS,
    HtmlExporter,
    JsonExporter,
    PdfExporter,
    TextExporter,
    build_export_context,
    get_exporter,
)
from branchbook.export.pages import NodePage
from branchbook.export.text_exporter import render_plain_text
from tests.fixtures.story_fixtures import make_chain

if TYPE_CHECKING:
    from pathlib import Path

    from branchbook.models import Story


def _order(pages: list) -> list[str]:
    return [p.node_id for p in pages if isinstance(p, NodePage)]


class TestBuildExportContext:
    def test_logical_order_without_shuffle(self, branching_story: Story) -> None:
        ctx = build_export_context(branching_story)

        assert _order(ctx.pages) == ["R", "A", "B", "C", "D", "Z"]
        assert ctx.language == "en"
        assert not ctx.shuffled

    def test_shuffle_with_seed_is_reproducible(self) -> None:
        story = make_chain(12)

        first = build_export_context(story, shuffle=True, seed=9)
        second = build_export_context(story, shuffle=True, seed=9)

        assert _order(first.pages) == _order(second.pages)
        assert _order(first.pages)[0] == "P0"
        assert first.shuffled

    def test_seed_from_config(self) -> None:
        story = make_chain(12)
        config = BookConfig(shuffle=ShuffleConfig(seed=9))

        from_config = build_export_context(story, config=config, shuffle=True)
        explicit = build_export_context(story, shuffle=True, seed=9)

        assert _order(from_config.pages) == _order(explicit.pages)

    def test_language_from_config(self, branching_story: Story) -> None:
        ctx = build_export_context(branching_story, config=BookConfig(language="fr"))

        assert ctx.language == "fr"

    def test_missing_root_rejected(self, branching_story: Story) -> None:
        story = branching_story.model_copy(update={"start_node_id": "nope"})

        with pytest.raises(ValueError, match="missing"):
            build_export_context(story)


class TestGetExporter:
    @pytest.mark.parametrize(
        ("name", "cls"),
        [
            ("html", HtmlExporter),
            ("pdf", PdfExporter),
            ("json", JsonExporter),
            ("txt", TextExporter),
        ],
    )
    def test_known_formats(self, name: str, cls: type) -> None:
        exporter = get_exporter(name)

        assert isinstance(exporter, cls)
        assert exporter.format_name == name

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown export format 'epub'"):
            get_exporter("epub")

    def test_formats_listed(self) -> None:
        assert set(EXPORT_FORMATS) == {"html", "pdf", "json", "txt"}


class TestTextExporter:
    def test_plain_text_book(self, cyclic_story: Story) -> None:
        text = render_plain_text(build_export_context(cyclic_story))

        assert text.startswith("The Test Book\n\n[Page 1]")
        assert "- Choose C1 (Turn to page ???)" in text
        assert "- Choose C2 (Turn to page 4)" in text
        assert "- Choose C3 (Turn to page 3)" in text

    def test_writes_file(self, tmp_path: Path, cyclic_story: Story) -> None:
        result = TextExporter().export(build_export_context(cyclic_story), tmp_path)

        assert result.name == "the_test_book.txt"
        assert "About This Adventure" in result.read_text()
