"""
ReportLab backend: executes a DocumentPlan on a PDF canvas.
"""

import logging
from io import BytesIO
from typing import Dict

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from revline.services.document_pdf.instructions import DocumentPlan, ImageAt, LineAt, RectAt, TableAt, TextAt
from revline.services.document_pdf.utils.asset_path import with_opacity

logger = logging.getLogger(__name__)

ROW_STRIPES = [colors.white, colors.HexColor("#f5f5f5")]


class PdfBackend:
    extension = "pdf"
    media_type = "application/pdf"

    def render(self, plan: DocumentPlan, assets: Dict[str, Image.Image]) -> bytes:
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(plan.width * mm, plan.height * mm))
        pdf.setTitle(plan.title)
        pdf.setAuthor("Revline Motor Works")

        for page in plan.pages:
            for instruction in page.instructions:
                if isinstance(instruction, TextAt):
                    self._text(pdf, plan, instruction)
                elif isinstance(instruction, ImageAt):
                    self._image(pdf, plan, instruction, assets)
                elif isinstance(instruction, RectAt):
                    pdf.setLineWidth(instruction.line_width * mm)
                    pdf.rect(instruction.x * mm, self._y(plan, instruction.y + instruction.height),
                             instruction.width * mm, instruction.height * mm, stroke=1, fill=0)
                elif isinstance(instruction, LineAt):
                    pdf.setLineWidth(instruction.line_width * mm)
                    pdf.line(instruction.x1 * mm, self._y(plan, instruction.y1),
                             instruction.x2 * mm, self._y(plan, instruction.y2))
                elif isinstance(instruction, TableAt):
                    self._table(pdf, plan, instruction)
            pdf.showPage()

        pdf.save()
        return buffer.getvalue()

    @staticmethod
    def _y(plan: DocumentPlan, y: float) -> float:
        # plan y grows downwards from the top edge, PDF y grows upwards from the bottom
        return (plan.height - y) * mm

    def _text(self, pdf, plan: DocumentPlan, text: TextAt) -> None:
        pdf.setFillColor(colors.black)
        pdf.setFont(text.font, text.size)
        x, y = text.x * mm, self._y(plan, text.y)
        if text.align == "right":
            pdf.drawRightString(x, y, text.text)
        elif text.align == "center":
            pdf.drawCentredString(x, y, text.text)
        else:
            pdf.drawString(x, y, text.text)

    def _image(self, pdf, plan: DocumentPlan, image: ImageAt, assets: Dict[str, Image.Image]) -> None:
        source = assets.get(image.asset)
        if source is None:
            logger.debug(f"Skipping image '{image.asset}': asset not loaded")
            return
        try:
            pdf.drawImage(
                ImageReader(with_opacity(source, image.opacity)),
                image.x * mm, self._y(plan, image.y + image.height),
                width=image.width * mm, height=image.height * mm,
                mask="auto", preserveAspectRatio=True, anchor="c",
            )
        except (OSError, ValueError) as e:
            logger.warning(f"Could not draw image asset '{image.asset}': {e}")

    def _table(self, pdf, plan: DocumentPlan, table: TableAt) -> None:
        data = [list(table.header)] + [list(row) for row in table.rows]
        flowable = Table(
            data,
            colWidths=[w * mm for w in table.col_widths],
            rowHeights=[h * mm for h in table.row_heights],
        )
        header_text = table.header_text / 255
        style = [
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), table.font_size),
            ('LEADING', (0, 0), (-1, -1), table.font_size * 1.15),
            ('BACKGROUND', (0, 0), (-1, 0), colors.Color(*(c / 255 for c in table.header_fill))),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.Color(header_text, header_text, header_text)),
            ('VALIGN', (0, 0), (-1, -1), table.valign.upper()),
            ('LEFTPADDING', (0, 0), (-1, -1), table.padding * mm),
            ('RIGHTPADDING', (0, 0), (-1, -1), table.padding * mm),
            ('TOPPADDING', (0, 0), (-1, -1), table.padding * mm),
            ('BOTTOMPADDING', (0, 0), (-1, -1), table.padding * mm),
        ]
        if table.rows:
            style.append(('ROWBACKGROUNDS', (0, 1), (-1, -1), ROW_STRIPES))
        for column, align in enumerate(table.col_align):
            style.append(('ALIGN', (column, 0), (column, -1), align.upper()))
        flowable.setStyle(TableStyle(style))

        flowable.wrapOn(pdf, table.width * mm, table.height * mm)
        flowable.drawOn(pdf, table.x * mm, self._y(plan, table.bottom))
