"""Printable HTML book export.

Renders the laid-out page sequence as one ``<section>`` per physical page,
styled for A5 printing. The same document feeds the PDF exporter.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

from branchbook.export.i18n import get_ui_strings
from branchbook.export.pages import BackCoverPage, CoverPage, NodePage
from branchbook.export.paginator import choice_target_label
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from branchbook.export.base import ExportContext
    from branchbook.export.pages import Page

log = get_logger(__name__)

# CSS for A5 book layout, one section per printed page
BOOK_CSS = """
@page {
    size: A5;
    margin: 15mm 12mm;
}

body {
    font-family: "Palatino Linotype", "Palatino", "Georgia", serif;
    font-size: 11pt;
    line-height: 1.5;
    color: #1a1a1a;
}

.page {
    page-break-after: always;
    position: relative;
    min-height: 170mm;
}

.cover {
    text-align: center;
    padding-top: 30mm;
}

.cover h1 {
    font-size: 28pt;
    font-weight: normal;
    margin-bottom: 1em;
}

.cover-image {
    max-width: 80%;
    max-height: 100mm;
    margin: 2em auto;
    display: block;
}

.back_cover h2 {
    text-align: center;
    font-size: 14pt;
    margin-bottom: 1em;
}

.illustration {
    max-width: 100%;
    max-height: 60mm;
    display: block;
    margin: 0 auto 1em;
}

.prose {
    text-align: justify;
}

.continued {
    font-style: italic;
    color: #555;
}

.choices {
    margin-top: 1.5em;
    font-style: italic;
}

.choice {
    margin-bottom: 0.5em;
}

.ending {
    text-align: center;
    font-weight: bold;
    margin-top: 2em;
    font-size: 12pt;
}

.page-footer {
    position: absolute;
    bottom: 0;
    width: 100%;
    text-align: center;
    font-size: 9pt;
    color: #666;
}
"""


class HtmlExporter:
    """Export the book as a single printable HTML file."""

    format_name = "html"

    def export(self, context: ExportContext, output_dir: Path) -> Path:
        """Write the book as HTML.

        Args:
            context: Laid-out book.
            output_dir: Directory to write output files.

        Returns:
            Path to the generated HTML file.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{context.slug}.html"
        output_file.write_text(render_book_html(context), encoding="utf-8")

        log.info("html_export_complete", pages=len(context.pages), output=str(output_file))
        return output_file


def render_book_html(context: ExportContext) -> str:
    """Render the complete HTML document for a laid-out book."""
    ui = get_ui_strings(context.language)

    parts: list[str] = [
        f"""<!DOCTYPE html>
<html lang="{html.escape(context.language)}">
<head>
<meta charset="UTF-8">
<title>{html.escape(context.story.title)}</title>
<style>
{BOOK_CSS}
</style>
</head>
<body>
"""
    ]

    for number, page in enumerate(context.pages, start=1):
        parts.append(_render_page(page, number, ui))

    parts.append("</body>\n</html>")
    return "\n".join(parts)


def _render_page(page: Page, number: int, ui: dict[str, str]) -> str:
    if isinstance(page, CoverPage):
        body = _render_cover(page, ui)
    elif isinstance(page, BackCoverPage):
        body = _render_back_cover(page, ui)
    else:
        body = _render_node_page(page, ui)

    footer = f'<p class="page-footer">{html.escape(ui["page"])} {number}</p>'
    return f'<section class="page {page.kind}" id="page-{number}">\n{body}\n{footer}\n</section>'


def _render_cover(page: CoverPage, ui: dict[str, str]) -> str:
    parts = [f"<h1>{html.escape(page.title)}</h1>"]
    if page.image_url:
        parts.append(
            f'<img class="cover-image" src="{html.escape(page.image_url)}" '
            f'alt="{html.escape(ui["cover_alt"])}">'
        )
    return "\n".join(parts)


def _render_back_cover(page: BackCoverPage, ui: dict[str, str]) -> str:
    parts = [f"<h2>{html.escape(ui['about'])}</h2>"]
    parts.append(f'<div class="prose">{_format_prose(page.prompt)}</div>')
    return "\n".join(parts)


def _render_node_page(page: NodePage, ui: dict[str, str]) -> str:
    """Render one chunk of a story page.

    The illustration goes on the first chunk only; choices or the ending
    marker go on the last chunk only.
    """
    parts: list[str] = []

    if page.shows_illustration:
        parts.append(
            f'<img class="illustration" src="{html.escape(page.node.illustration_url or "")}" '
            f'alt="{html.escape(ui["illustration_alt"])}">'
        )

    if page.continued_from is not None:
        marker = html.escape(ui["continued_from"])
        parts.append(f'<p class="continued">({marker} {page.continued_from})...</p>')

    parts.append(f'<div class="prose">{_format_prose(page.chunk)}</div>')

    if page.continued_to is not None:
        marker = html.escape(ui["continued_on"])
        parts.append(f'<p class="continued">...({marker} {page.continued_to})</p>')

    if page.is_last_chunk:
        if page.is_ending:
            parts.append(f'<p class="ending">{html.escape(ui["the_end"])}</p>')
        elif page.choice_refs:
            parts.append(_render_choices(page, ui))

    return "\n".join(parts)


def _render_choices(page: NodePage, ui: dict[str, str]) -> str:
    parts: list[str] = ['<div class="choices">']
    parts.append(f"<p>{html.escape(ui['your_choices'])}</p>")
    for ref in page.choice_refs:
        parts.append(
            f'<p class="choice">{html.escape(ref.text)} '
            f"({html.escape(ui['turn_to_page'])} <strong>{choice_target_label(ref)}</strong>)</p>"
        )
    parts.append("</div>")
    return "\n".join(parts)


def _format_prose(prose: str) -> str:
    """Format prose text as HTML paragraphs.

    Double newlines split paragraphs into separate <p> tags. Single
    newlines within a paragraph become <br> tags. Whitespace-only
    paragraphs are dropped.
    """
    formatted = []
    for paragraph in prose.strip().split("\n\n"):
        p_html = html.escape(paragraph.strip()).replace("\n", "<br>")
        if p_html:
            formatted.append(f"<p>{p_html}</p>")
    return "\n".join(formatted)
