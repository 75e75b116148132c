"""Export context and Exporter protocol.

Defines the laid-out book (ExportContext) that all exporters consume,
plus the Exporter protocol they must implement.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

    from branchbook.export.pages import Page
    from branchbook.models.story import Story

DEFAULT_SLUG = "cyoa_story"


@dataclass
class ExportContext:
    """A story snapshot and its final page sequence.

    The snapshot must not change while an export runs; exporters only read
    it.
    """

    story: Story
    pages: list[Page]
    language: str = "en"
    shuffled: bool = False

    @property
    def slug(self) -> str:
        """Filesystem-safe file stem derived from the title."""
        return story_slug(self.story.title)


def story_slug(title: str) -> str:
    """Lowercase title with every non-alphanumeric character replaced by ``_``."""
    return re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower() or DEFAULT_SLUG


class Exporter(Protocol):
    """Protocol for book export format handlers."""

    format_name: str

    def export(self, context: ExportContext, output_dir: Path) -> Path:
        """Export the book to the given output directory.

        Args:
            context: Laid-out book.
            output_dir: Directory to write output files.

        Returns:
            Path to the main output file.
        """
        ...
