"""Printable PDF export.

Converts the A5 HTML book to PDF with WeasyPrint.

Requires the optional `pdf` dependency: `pip install branchbook[pdf]`
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from branchbook.export.html_exporter import render_book_html
from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from branchbook.export.base import ExportContext

log = get_logger(__name__)


class PdfExporter:
    """Export the book as a print-ready PDF."""

    format_name = "pdf"

    def export(self, context: ExportContext, output_dir: Path) -> Path:
        """Write the book as a PDF, one printed page per laid-out page.

        Args:
            context: Laid-out book.
            output_dir: Directory to write output files.

        Returns:
            Path to the generated PDF file.

        Raises:
            ImportError: If WeasyPrint is not installed.
        """
        try:
            from weasyprint import HTML
        except ImportError as e:
            msg = "WeasyPrint is required for PDF export. Install with: pip install branchbook[pdf]"
            raise ImportError(msg) from e

        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{context.slug}.pdf"

        # Relative image URLs resolve against the output directory
        html_doc = HTML(string=render_book_html(context), base_url=str(output_dir))
        html_doc.write_pdf(output_file)

        log.info("pdf_export_complete", pages=len(context.pages), output=str(output_file))
        return output_file
