"""
Page layout for service invoices, payslips and the mechanic task list.

Invoices and payslips share the same A4 furniture: a faint watermark behind
everything, a title with a metadata block on the left, the shop logo and
address on the right, one table, a totals block and a signature/stamp footer
pinned to the bottom of the last page. Layouts only produce a DocumentPlan;
they never touch a canvas.
"""

from typing import List, Sequence, Tuple

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit

from revline.services.document_pdf.instructions import DocumentPlan, PlanBuilder, TableAt
from revline.services.document_pdf.models import (
    InvoiceRecord,
    InvoiceVariant,
    PayslipRecord,
    RenderSettings,
    TaskList,
)
from revline.utils.timezone_utils import format_datetime_for_display

REGULAR = "Helvetica"
BOLD = "Helvetica-Bold"

PAGE_WIDTH = 210
PAGE_HEIGHT = 297
MARGIN = 14
CONTENT_RIGHT = PAGE_WIDTH - MARGIN

WATERMARK_SIZE = 160

TITLE_Y = 20
TITLE_FONT_SIZE = 18
META_FONT_SIZE = 9.5

LOGO_WIDTH = 50
LOGO_HEIGHT = 20
LOGO_Y = 14
ADDRESS_GAP = 5
ADDRESS_LINE_HEIGHT = 5
ADDRESS_FONT_SIZE = 9

TABLE_MARGIN = 10
METADATA_MARGIN = 5
MIN_TABLE_Y = 70
CONTINUATION_Y = 20
TABLE_FONT_SIZE = 10
CELL_PADDING = 4
LEADING = 1.15

TOTAL_GAP = 12
TOTAL_LINE_SPACING = 8
TOTAL_FONT_SIZE = 14

FOOTER_OFFSET = 40
FOOTER_Y = PAGE_HEIGHT - FOOTER_OFFSET
FOOTER_FONT_SIZE = 11
SIGNATURE_GAP = 20
SIGNATURE_LINE_END = 80
STAMP_WIDTH = 60
STAMP_HEIGHT = 30
STAMP_TOP_OFFSET = 10
# Tables and totals stay clear of the stamp box on every page
CONTENT_BOTTOM = FOOTER_Y - STAMP_TOP_OFFSET - 4

INVOICE_COLUMNS = {
    InvoiceVariant.QUANTITY: (("Service & Product", "Qty", "Price"), (112, 25, 45), ("left", "center", "right")),
    InvoiceVariant.DETAILS: (("Service", "Details", "Price"), (62, 75, 45), ("left", "left", "right")),
}
PAYSLIP_COLUMNS = (("Deduction", "Amount"), (132, 50), ("left", "right"))
TASK_COLUMNS = (("Customer", "Checklist"), (60, 122), ("left", "left"))

TASK_TITLE = "Mechanic Task List"
TASK_TITLE_FONT_SIZE = 16
TASK_TABLE_Y = 30
TASK_FONT_SIZE = 18
TASK_CELL_PADDING = 2
TASK_FILE_STEM = "tasks"


def address_bottom(line_count: int) -> float:
    """Baseline slot just below the last address line under the logo."""
    return LOGO_Y + LOGO_HEIGHT + ADDRESS_GAP + line_count * ADDRESS_LINE_HEIGHT


def table_start_y(address_end: float, metadata_end: float) -> float:
    return max(address_end + TABLE_MARGIN, metadata_end + METADATA_MARGIN, MIN_TABLE_Y)


def invoice_file_stem(invoice_id: str) -> str:
    return f"invoice-{invoice_id}"


def payslip_file_stem(employee_id: str, month: str) -> str:
    return f"payslip-{employee_id}-{month}"


def line_height(font_size: float = TABLE_FONT_SIZE) -> float:
    return font_size * LEADING / mm


class DocumentLayout:
    signature_label = "Signature:"
    table_font_size = TABLE_FONT_SIZE
    cell_padding = CELL_PADDING
    table_valign = "middle"
    content_bottom = CONTENT_BOTTOM

    def __init__(self, settings: RenderSettings = None):
        self.settings = settings or RenderSettings()

    def build(self, record) -> DocumentPlan:
        raise NotImplementedError

    # page furniture

    def _start_page(self, builder: PlanBuilder) -> None:
        x = (PAGE_WIDTH - WATERMARK_SIZE) / 2
        y = (PAGE_HEIGHT - WATERMARK_SIZE) / 3
        builder.image_at("watermark", x, y, WATERMARK_SIZE, WATERMARK_SIZE, opacity=self.settings.watermark_opacity)

    def _new_page(self, builder: PlanBuilder) -> None:
        builder.new_page()
        self._start_page(builder)

    def _draw_heading(self, builder: PlanBuilder, title: str, lines: Sequence[Tuple[float, str]]) -> float:
        builder.text_at(MARGIN, TITLE_Y, title, font=BOLD, size=TITLE_FONT_SIZE)
        bottom = TITLE_Y
        for y, text in lines:
            builder.text_at(MARGIN, y, text, size=META_FONT_SIZE)
            bottom = max(bottom, y)
        return bottom

    def _draw_letterhead(self, builder: PlanBuilder) -> float:
        builder.image_at("logo", PAGE_WIDTH - LOGO_WIDTH - MARGIN, LOGO_Y, LOGO_WIDTH, LOGO_HEIGHT)
        y = LOGO_Y + LOGO_HEIGHT + ADDRESS_GAP
        for line in self.settings.address_lines:
            builder.text_at(CONTENT_RIGHT, y, line, size=ADDRESS_FONT_SIZE, align="right")
            y += ADDRESS_LINE_HEIGHT
        return address_bottom(len(self.settings.address_lines))

    def _draw_footer(self, builder: PlanBuilder) -> None:
        builder.text_at(MARGIN, FOOTER_Y, self.signature_label, size=FOOTER_FONT_SIZE)
        signature_y = FOOTER_Y + SIGNATURE_GAP
        builder.line_at(MARGIN, signature_y, SIGNATURE_LINE_END, signature_y)
        builder.rect_at(PAGE_WIDTH - STAMP_WIDTH - MARGIN, FOOTER_Y - STAMP_TOP_OFFSET, STAMP_WIDTH, STAMP_HEIGHT)

    # table

    def _wrap(self, text: str, width: float, font: str) -> List[str]:
        available = (width - 2 * self.cell_padding) * mm
        lines = []
        for part in text.split("\n"):
            lines.extend(simpleSplit(part, font, self.table_font_size, available) or [""])
        return lines or [""]

    def _row(self, cells: Sequence[str], widths: Sequence[float], font: str = REGULAR) -> Tuple[Tuple[str, ...], float]:
        wrapped = [self._wrap(cell, width, font) for cell, width in zip(cells, widths)]
        lines = max(len(cell) for cell in wrapped)
        height = round(lines * line_height(self.table_font_size) + 2 * self.cell_padding, 3)
        return tuple("\n".join(cell) for cell in wrapped), height

    def _place_table(self, builder: PlanBuilder, start_y: float, header: Sequence[str],
                     rows: Sequence[Sequence[str]], widths: Sequence[float], align: Sequence[str]) -> TableAt:
        header_cells, header_height = self._row(header, widths, BOLD)

        def emit(top, chunk, heights):
            return builder.table(
                x=MARGIN, y=top, col_widths=tuple(widths), col_align=tuple(align),
                header=header_cells, rows=tuple(chunk), row_heights=(header_height, *heights),
                font_size=self.table_font_size, padding=self.cell_padding, valign=self.table_valign,
            )

        top = start_y
        chunk, heights = [], []
        for row in rows:
            cells, height = self._row(row, widths)
            if top + header_height + sum(heights) + height > self.content_bottom and (chunk or top > CONTINUATION_Y):
                if chunk:
                    emit(top, chunk, heights)
                self._new_page(builder)
                top = CONTINUATION_Y
                chunk, heights = [], []
            chunk.append(cells)
            heights.append(height)
        return emit(top, chunk, heights)

    def _place_totals(self, builder: PlanBuilder, table_bottom: float,
                      lines: Sequence[Tuple[str, str, float]]) -> None:
        y = table_bottom + TOTAL_GAP
        if y + TOTAL_LINE_SPACING * (len(lines) - 1) > self.content_bottom:
            self._new_page(builder)
            y = CONTINUATION_Y
        for text, font, size in lines:
            builder.text_at(CONTENT_RIGHT, y, text, font=font, size=size, align="right")
            y += TOTAL_LINE_SPACING


class InvoiceLayout(DocumentLayout):
    title = "Service Invoice"
    signature_label = "Customer Signature:"

    def metadata_lines(self, record: InvoiceRecord) -> List[Tuple[float, str]]:
        created = format_datetime_for_display(record.created_at, self.settings.display_timezone)
        lines = [
            (25, f"Invoice No: {record.invoice_id}"),
            (30, f"Customer: {record.customer_name}"),
            (35, f"Phone Number: {record.phone_number or '-'}"),
            (40, f"Plate No: {record.plate_number or '-'}"),
            (45, f"Bike: {record.motorcycle_name or '-'}"),
            (50, f"Mileage: {record.mileage}KM" if record.mileage else "Mileage: -"),
            (55, f"Mechanic: {record.mechanic_name or '-'}"),
        ]
        if self.settings.show_payment_status:
            lines.append((60, f"Payment: {'PAID' if record.is_paid else 'UNPAID'}"))
        lines.append((65, f"Date: {created or '-'}"))
        return lines

    def table_rows(self, record: InvoiceRecord) -> List[Tuple[str, str, str]]:
        rows = []
        for item in record.line_items:
            if self.settings.invoice_variant == InvoiceVariant.DETAILS:
                middle = item.details or "-"
            else:
                middle = self.settings.quantity_label(item.quantity)
            rows.append((item.name, middle, self.settings.money(item.amount)))
        return rows

    def build(self, record: InvoiceRecord) -> DocumentPlan:
        builder = PlanBuilder(title=f"Invoice {record.invoice_id}", filename_stem=invoice_file_stem(record.invoice_id))
        self._start_page(builder)
        metadata_end = self._draw_heading(builder, self.title, self.metadata_lines(record))
        address_end = self._draw_letterhead(builder)

        header, widths, align = INVOICE_COLUMNS[self.settings.invoice_variant]
        table = self._place_table(builder, table_start_y(address_end, metadata_end), header,
                                  self.table_rows(record), widths, align)
        self._place_totals(builder, table.bottom, [(f"Total: {self.settings.money(record.total)}", BOLD, TOTAL_FONT_SIZE)])
        self._draw_footer(builder)
        return builder.build()


class PayslipLayout(DocumentLayout):
    signature_label = "Employee Signature:"

    def build(self, record: PayslipRecord) -> DocumentPlan:
        money = self.settings.money
        builder = PlanBuilder(title=f"Payslip {record.month}",
                              filename_stem=payslip_file_stem(record.employee_id, record.month))
        self._start_page(builder)
        metadata_end = self._draw_heading(builder, f"Payslip - {record.month}", [
            (30, f"Employee: {record.employee_name}"),
            (35, f"Employee ID: {record.employee_id}"),
            (40, f"Month: {record.month}"),
        ])
        address_end = self._draw_letterhead(builder)

        header, widths, align = PAYSLIP_COLUMNS
        rows = [(d.title or "-", money(d.amount)) for d in record.deductions]
        table = self._place_table(builder, table_start_y(address_end, metadata_end), header, rows, widths, align)
        self._place_totals(builder, table.bottom, [
            (f"Base Salary: {money(record.base_salary)}", REGULAR, FOOTER_FONT_SIZE),
            (f"Total Deductions: {money(record.total_deductions)}", REGULAR, FOOTER_FONT_SIZE),
            (f"Net Salary: {money(record.net_salary)}", BOLD, TOTAL_FONT_SIZE),
        ])
        self._draw_footer(builder)
        return builder.build()


class TaskListLayout(DocumentLayout):
    """Checklist of services per selected order, for the mechanics' bench. Plain pages, no letterhead."""

    table_font_size = TASK_FONT_SIZE
    cell_padding = TASK_CELL_PADDING
    table_valign = "top"
    content_bottom = PAGE_HEIGHT - MARGIN

    def _start_page(self, builder: PlanBuilder) -> None:
        return None

    def build(self, task_list: TaskList) -> DocumentPlan:
        builder = PlanBuilder(title=TASK_TITLE, filename_stem=TASK_FILE_STEM)
        self._start_page(builder)
        builder.text_at(MARGIN, TITLE_Y, TASK_TITLE, font=BOLD, size=TASK_TITLE_FONT_SIZE)

        header, widths, align = TASK_COLUMNS
        rows = [(order.customer_name, order.checklist) for order in task_list.orders]
        self._place_table(builder, TASK_TABLE_Y, header, rows, widths, align)
        return builder.build()
