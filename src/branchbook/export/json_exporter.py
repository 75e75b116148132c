"""JSON story export.

Writes the story itself (not the laid-out book) in the camelCase format
that ``load_story`` reads back, so a book can be shared and reopened.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from branchbook.export.base import ExportContext

log = get_logger(__name__)

STORY_FILE_SUFFIX = ".cyoa.json"


class JsonExporter:
    """Export the story as a shareable JSON file."""

    format_name = "json"

    def export(self, context: ExportContext, output_dir: Path) -> Path:
        """Write story data as formatted JSON.

        Args:
            context: Laid-out book; only its story snapshot is written.
            output_dir: Directory to write output files.

        Returns:
            Path to the generated ``<slug>.cyoa.json`` file.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{context.slug}{STORY_FILE_SUFFIX}"
        output_file.write_text(context.story.to_json(), encoding="utf-8")

        log.info("json_export_complete", nodes=len(context.story.nodes), output=str(output_file))
        return output_file
