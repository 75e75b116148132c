"""Book layout and export format handlers (HTML, PDF, JSON, text)."""

from __future__ import annotations

from branchbook.export.base import ExportContext, Exporter, story_slug
from branchbook.export.context import build_export_context
from branchbook.export.html_exporter import HtmlExporter
from branchbook.export.json_exporter import JsonExporter
from branchbook.export.pages import BackCoverPage, ChoiceReference, CoverPage, NodePage, Page
from branchbook.export.paginator import layout_pages, number_pages, physical_page_map, split_text
from branchbook.export.pdf_exporter import PdfExporter
from branchbook.export.shuffle import shuffle_pages
from branchbook.export.text_exporter import TextExporter

_EXPORTERS: dict[str, type[HtmlExporter | PdfExporter | JsonExporter | TextExporter]] = {
    "html": HtmlExporter,
    "pdf": PdfExporter,
    "json": JsonExporter,
    "txt": TextExporter,
}

EXPORT_FORMATS = tuple(_EXPORTERS)


def get_exporter(format_name: str) -> HtmlExporter | PdfExporter | JsonExporter | TextExporter:
    """Get an exporter instance by format name.

    Args:
        format_name: Export format (e.g., "html", "pdf", "json").

    Returns:
        Exporter instance.

    Raises:
        ValueError: If the format is not supported.
    """
    cls = _EXPORTERS.get(format_name)
    if cls is None:
        supported = ", ".join(sorted(_EXPORTERS))
        msg = f"Unknown export format '{format_name}'. Supported: {supported}"
        raise ValueError(msg)
    return cls()


__all__ = [
    "EXPORT_FORMATS",
    "BackCoverPage",
    "ChoiceReference",
    "CoverPage",
    "ExportContext",
    "Exporter",
    "HtmlExporter",
    "JsonExporter",
    "NodePage",
    "Page",
    "PdfExporter",
    "TextExporter",
    "build_export_context",
    "get_exporter",
    "layout_pages",
    "number_pages",
    "physical_page_map",
    "shuffle_pages",
    "split_text",
    "story_slug",
]
