"""Plain-text book export.

One block per physical page, footed with its page number. Useful for
proofreading the layout without a browser or PDF viewer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from branchbook.export.i18n import get_ui_strings
from branchbook.export.pages import BackCoverPage, CoverPage
from branchbook.export.paginator import choice_target_label, page_text
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from branchbook.export.base import ExportContext

log = get_logger(__name__)


class TextExporter:
    """Export the book as plain text."""

    format_name = "txt"

    def export(self, context: ExportContext, output_dir: Path) -> Path:
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{context.slug}.txt"
        output_file.write_text(render_plain_text(context), encoding="utf-8")

        log.info("text_export_complete", pages=len(context.pages), output=str(output_file))
        return output_file


def render_plain_text(context: ExportContext) -> str:
    """Render the book as plain text, one block per physical page."""
    ui = get_ui_strings(context.language)
    blocks: list[str] = []
    for number, page in enumerate(context.pages, start=1):
        if isinstance(page, CoverPage):
            body = page.title
        elif isinstance(page, BackCoverPage):
            body = f"{ui['about']}\n\n{page.prompt}"
        else:
            body = page_text(page, ui)
            if page.is_last_chunk and page.is_ending:
                body = f"{body}\n\n{ui['the_end']}"
            elif page.is_last_chunk and page.choice_refs:
                lines = [
                    f"- {ref.text} ({ui['turn_to_page']} {choice_target_label(ref)})"
                    for ref in page.choice_refs
                ]
                body = f"{body}\n\n{ui['your_choices']}\n" + "\n".join(lines)
        blocks.append(f"{body}\n\n[{ui['page']} {number}]")
    return "\n\n".join(blocks) + "\n"
