from __future__ import annotations

import logging

from fpdf import FPDF

from rechnung.pdf.document import AddressBlock, InvoiceDocument

logger = logging.getLogger(__name__)

FONT = "Helvetica"

TEXT_COLOR = (0, 0, 0)
MUTED_TEXT = (113, 113, 122)
LABEL_TEXT = (179, 179, 179)
RULE_COLOR = (0, 0, 0)
ROW_RULE_COLOR = (228, 228, 231)


def _latin1(text: str) -> str:
    """The built-in PDF fonts only cover latin-1; spell out the euro sign."""
    return text.replace("€", "EUR").encode("latin-1", "replace").decode("latin-1")


class InvoicePDF:
    def generate(self, document: InvoiceDocument) -> bytes:
        pdf = FPDF(format="A4")
        pdf.set_margins(20, 20, 20)
        pdf.set_auto_page_break(auto=True, margin=20)
        pdf.add_page()
        pdf.set_title(_latin1(f"{document.title} {document.number}"))

        page_w = pdf.w - pdf.l_margin - pdf.r_margin

        self._draw_header(pdf, page_w, document)
        self._draw_addresses(pdf, page_w, document.issuer, document.recipient)
        self._draw_meta(pdf, page_w, document.meta)
        self._draw_table(pdf, page_w, document)
        self._draw_total(pdf, page_w, document)
        self._draw_footer(pdf, page_w, document)

        output = bytes(pdf.output())
        logger.debug(
            "PDF generated: number=%s items=%d size=%d bytes",
            document.number,
            len(document.rows),
            len(output),
        )
        return output

    def _draw_header(self, pdf: FPDF, page_w: float, document: InvoiceDocument) -> None:
        pdf.set_text_color(*TEXT_COLOR)
        pdf.set_font(FONT, "B", 26)
        pdf.cell(page_w / 2, 12, _latin1(document.title))
        pdf.set_font(FONT, "", 11)
        pdf.set_text_color(*MUTED_TEXT)
        pdf.cell(page_w / 2, 12, _latin1(f"Nr. {document.number}"), align="R", new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

        pdf.set_draw_color(*RULE_COLOR)
        pdf.set_line_width(0.8)
        y = pdf.get_y()
        pdf.line(pdf.l_margin, y, pdf.l_margin + page_w, y)
        pdf.ln(8)

    def _draw_address(self, pdf: FPDF, x: float, y: float, w: float, block: AddressBlock) -> float:
        pdf.set_xy(x, y)
        pdf.set_font(FONT, "B", 7)
        pdf.set_text_color(*LABEL_TEXT)
        pdf.cell(w, 5, _latin1(block.label), new_x="LEFT", new_y="NEXT")
        pdf.set_font(FONT, "B", 11)
        pdf.set_text_color(*TEXT_COLOR)
        pdf.cell(w, 6, _latin1(block.name), new_x="LEFT", new_y="NEXT")
        pdf.set_font(FONT, "", 10)
        for line in block.lines:
            pdf.cell(w, 5, _latin1(line), new_x="LEFT", new_y="NEXT")
        return pdf.get_y()

    def _draw_addresses(self, pdf: FPDF, page_w: float, issuer: AddressBlock, recipient: AddressBlock) -> None:
        y = pdf.get_y()
        col_w = page_w / 2
        bottom_left = self._draw_address(pdf, pdf.l_margin, y, col_w - 4, issuer)
        bottom_right = self._draw_address(pdf, pdf.l_margin + col_w, y, col_w, recipient)
        pdf.set_xy(pdf.l_margin, max(bottom_left, bottom_right) + 8)

    def _draw_meta(self, pdf: FPDF, page_w: float, meta: list[tuple[str, str]]) -> None:
        col_w = page_w / max(len(meta), 1)
        pdf.set_font(FONT, "B", 7)
        pdf.set_text_color(*LABEL_TEXT)
        for label, _ in meta:
            pdf.cell(col_w, 5, _latin1(label))
        pdf.ln(5)
        pdf.set_font(FONT, "", 10)
        pdf.set_text_color(*TEXT_COLOR)
        for _, value in meta:
            pdf.cell(col_w, 6, _latin1(value))
        pdf.ln(10)

        pdf.set_draw_color(*ROW_RULE_COLOR)
        pdf.set_line_width(0.3)
        y = pdf.get_y()
        pdf.line(pdf.l_margin, y, pdf.l_margin + page_w, y)
        pdf.ln(6)

    def _draw_table(self, pdf: FPDF, page_w: float, document: InvoiceDocument) -> None:
        col_desc = page_w * 0.46
        col_qty = page_w * 0.16
        col_price = page_w * 0.19
        col_total = page_w * 0.19

        pdf.set_font(FONT, "B", 7)
        pdf.set_text_color(*LABEL_TEXT)
        pdf.cell(col_desc, 6, "LEISTUNG")
        pdf.cell(col_qty, 6, "MENGE", align="R")
        pdf.cell(col_price, 6, "EINZELPREIS", align="R")
        pdf.cell(col_total, 6, "BETRAG", align="R", new_x="LMARGIN", new_y="NEXT")
        pdf.ln(2)

        for row in document.rows:
            if pdf.get_y() + 16 > pdf.h - pdf.b_margin:
                pdf.add_page()
            y = pdf.get_y()
            pdf.set_text_color(*TEXT_COLOR)
            pdf.set_font(FONT, "B", 10)
            pdf.multi_cell(col_desc, 5, _latin1(row.description), new_x="LEFT", new_y="NEXT")
            if row.sub_description:
                pdf.set_font(FONT, "", 8)
                pdf.set_text_color(*MUTED_TEXT)
                pdf.multi_cell(col_desc, 4, _latin1(row.sub_description), new_x="LEFT", new_y="NEXT")
            row_bottom = pdf.get_y()

            pdf.set_xy(pdf.l_margin + col_desc, y)
            pdf.set_font(FONT, "", 10)
            pdf.set_text_color(*TEXT_COLOR)
            pdf.cell(col_qty, 5, _latin1(row.quantity), align="R")
            pdf.cell(col_price, 5, _latin1(row.unit_price), align="R")
            pdf.set_font(FONT, "B", 10)
            pdf.cell(col_total, 5, _latin1(row.total), align="R")

            pdf.set_xy(pdf.l_margin, row_bottom + 3)
            pdf.set_draw_color(*ROW_RULE_COLOR)
            pdf.set_line_width(0.2)
            line_y = pdf.get_y()
            pdf.line(pdf.l_margin, line_y, pdf.l_margin + page_w, line_y)
            pdf.ln(3)

    def _draw_total(self, pdf: FPDF, page_w: float, document: InvoiceDocument) -> None:
        pdf.ln(4)
        col_label = page_w * 0.75
        col_amount = page_w * 0.25

        pdf.set_font(FONT, "", 10)
        for label, value in document.totals:
            pdf.set_text_color(*MUTED_TEXT)
            pdf.cell(col_label, 6, _latin1(label), align="R")
            pdf.set_text_color(*TEXT_COLOR)
            pdf.cell(col_amount, 6, _latin1(value), align="R", new_x="LMARGIN", new_y="NEXT")

        label, value = document.grand_total
        pdf.set_font(FONT, "B", 10)
        pdf.set_text_color(*MUTED_TEXT)
        pdf.cell(col_label, 9, _latin1(label), align="R")
        pdf.set_font(FONT, "B", 16)
        pdf.set_text_color(*TEXT_COLOR)
        pdf.cell(col_amount, 9, _latin1(value), align="R", new_x="LMARGIN", new_y="NEXT")
        pdf.ln(10)

        if document.notes:
            pdf.set_font(FONT, "", 10)
            pdf.multi_cell(page_w, 5, _latin1(document.notes), new_x="LMARGIN", new_y="NEXT")
            pdf.ln(6)

    def _draw_footer(self, pdf: FPDF, page_w: float, document: InvoiceDocument) -> None:
        footer_h = 12 + 6 * len(document.bank) + (10 if document.vat_notice else 0)
        # Keep the bank block at the bottom of the page unless the table already reached it.
        target_y = pdf.h - pdf.b_margin - footer_h
        if pdf.get_y() < target_y:
            pdf.set_y(target_y)
        elif pdf.get_y() + footer_h > pdf.h - pdf.b_margin:
            pdf.add_page()

        if document.vat_notice:
            pdf.set_font(FONT, "I", 8)
            pdf.set_text_color(*MUTED_TEXT)
            pdf.cell(page_w, 5, _latin1(document.vat_notice), new_x="LMARGIN", new_y="NEXT")
            pdf.ln(5)

        pdf.set_draw_color(*RULE_COLOR)
        pdf.set_line_width(0.3)
        y = pdf.get_y()
        pdf.line(pdf.l_margin, y, pdf.l_margin + page_w, y)
        pdf.ln(6)

        pdf.set_font(FONT, "B", 7)
        pdf.set_text_color(*LABEL_TEXT)
        pdf.cell(page_w, 5, _latin1(document.bank_label), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(1)

        for label, value in document.bank:
            pdf.set_font(FONT, "", 10)
            pdf.set_text_color(*MUTED_TEXT)
            pdf.cell(50, 6, _latin1(label))
            pdf.set_text_color(*TEXT_COLOR)
            pdf.cell(page_w - 50, 6, _latin1(value), new_x="LMARGIN", new_y="NEXT")
