from __future__ import annotations

import logging
from pathlib import Path

from rich.panel import Panel

from rechnung.errors import DocumentGenerationError
from rechnung.models.business_settings import BusinessSettings
from rechnung.models.invoice import Invoice
from rechnung.pdf.document import build_document
from rechnung.pdf.invoice import InvoicePDF
from rechnung.pdf.preview import render_preview
from rechnung.services.invoice_builder import validate_invoice

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(self, output_dir: str) -> None:
        self.output_dir = Path(output_dir)
        self.pdf_generator = InvoicePDF()

    def preview(self, invoice: Invoice, settings: BusinessSettings) -> Panel:
        return render_preview(build_document(invoice, settings))

    def render_pdf(self, invoice: Invoice, settings: BusinessSettings) -> bytes:
        try:
            return self.pdf_generator.generate(build_document(invoice, settings))
        except Exception as exc:
            logger.exception("PDF generation failed for invoice %s", invoice.invoice_number)
            raise DocumentGenerationError(f"Failed to generate PDF: {exc}") from exc

    def export_pdf(self, invoice: Invoice, settings: BusinessSettings) -> Path:
        """Render and write ``Rechnung-<number>-<dd-MM-yyyy>.pdf``; returns the file path.

        The file only appears once the whole document has been rendered.
        """
        validate_invoice(invoice.invoice_number, invoice.date, invoice.client, invoice.line_items, settings)
        data = self.render_pdf(invoice, settings)
        document = build_document(invoice, settings)
        path = self.output_dir / f"{document.filename_stem.replace('/', '-')}.pdf"
        tmp = path.with_suffix(".pdf.tmp")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            tmp.replace(path)
        except OSError as exc:
            logger.exception("Failed to write PDF to %s", path)
            tmp.unlink(missing_ok=True)
            raise DocumentGenerationError(f"Failed to write PDF: {exc}") from exc
        logger.info("PDF written to %s (%d bytes)", path, len(data))
        return path
