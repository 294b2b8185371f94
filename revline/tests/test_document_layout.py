from decimal import Decimal

import pytest

from revline.services.document_pdf.instructions import ImageAt, LineAt, RectAt, TextAt
from revline.services.document_pdf.layout import (
    CONTENT_BOTTOM,
    CONTINUATION_Y,
    MIN_TABLE_Y,
    InvoiceLayout,
    PayslipLayout,
    TaskListLayout,
    line_height,
    table_start_y,
)
from revline.services.document_pdf.models import (
    InvoiceVariant,
    LineItem,
    PayslipRecord,
    QuantityZeroDisplay,
    RenderSettings,
    TaskItem,
    TaskList,
    TaskOrder,
)
from revline.services.record_adapter import adapt_order


def _items(count):
    return tuple(LineItem(name=f"Service {n}", unit_price=Decimal("10"), quantity=1) for n in range(count))


class TestInvoiceLayout:

    def test_single_service_invoice(self, invoice_record):
        plan = InvoiceLayout().build(invoice_record)

        assert plan.filename_stem == "invoice-INV1"
        assert len(plan.pages) == 1
        table = plan.tables()[0]
        assert table.header == ("Service & Product", "Qty", "Price")
        assert table.rows == (("Oil Change", "1", "RM35.00"),)

        total = plan.find_text("Total:")
        assert total.text == "Total: RM35.00"
        assert total.bold
        assert total.size == 14
        assert total.align == "right"
        assert total.y == pytest.approx(table.bottom + 12)

    def test_metadata_block(self, invoice_record):
        plan = InvoiceLayout().build(invoice_record)

        assert plan.find_text("Service Invoice").size == 18
        assert plan.find_text("Invoice No:").text == "Invoice No: INV1"
        assert plan.find_text("Invoice No:").y == 25
        assert plan.find_text("Customer:").text == "Customer: Tan"
        assert plan.find_text("Mileage:").text == "Mileage: 12000KM"
        assert plan.find_text("Payment:").y == 60
        date = plan.find_text("Date:")
        assert date.text == "Date: 05/01/2025, 18:00:00"
        assert date.y == 65

    def test_missing_optional_fields_print_dashes(self, invoice_record):
        record = invoice_record.model_copy(update={"phone_number": None, "mileage": None, "created_at": None})
        plan = InvoiceLayout().build(record)

        assert plan.find_text("Phone Number:").text == "Phone Number: -"
        assert plan.find_text("Mileage:").text == "Mileage: -"
        assert plan.find_text("Date:").text == "Date: -"

    def test_empty_items_render_header_only(self, invoice_record):
        record = invoice_record.model_copy(update={"line_items": (), "total_charge": None})
        plan = InvoiceLayout().build(record)

        tables = plan.tables()
        assert len(tables) == 1
        assert tables[0].rows == ()
        assert len(tables[0].row_heights) == 1
        assert plan.find_text("Total:").text == "Total: RM0.00"

    def test_one_row_per_line_item(self, invoice_record):
        record = invoice_record.model_copy(update={"line_items": _items(5), "total_charge": None})
        plan = InvoiceLayout().build(record)

        assert len(plan.tables()[0].rows) == 5
        assert plan.find_text("Total:").text == "Total: RM50.00"

    def test_table_clears_letterhead(self, invoice_record):
        plan = InvoiceLayout().build(invoice_record)
        # five address lines end below the metadata block
        assert plan.tables()[0].y == pytest.approx(74)

    def test_table_never_starts_above_minimum(self, invoice_record):
        plan = InvoiceLayout(RenderSettings(address_lines=())).build(invoice_record)
        assert plan.tables()[0].y >= MIN_TABLE_Y
        assert table_start_y(0, 0) == MIN_TABLE_Y

    def test_paid_and_unpaid_differ_only_in_payment_line(self, invoice_record):
        paid = InvoiceLayout().build(invoice_record)
        unpaid = InvoiceLayout().build(invoice_record.model_copy(update={"is_paid": False}))

        def without_payment(plan):
            return [i for page in plan.pages for i in page.instructions
                    if not (isinstance(i, TextAt) and i.text.startswith("Payment:"))]

        assert without_payment(paid) == without_payment(unpaid)
        assert paid.find_text("Payment:").text == "Payment: PAID"
        assert unpaid.find_text("Payment:").text == "Payment: UNPAID"

    def test_payment_status_can_be_hidden(self, invoice_record):
        plan = InvoiceLayout(RenderSettings(show_payment_status=False)).build(invoice_record)
        with pytest.raises(KeyError):
            plan.find_text("Payment:")

    def test_untracked_quantity(self, invoice_record):
        item = LineItem(name="Brake Check", unit_price=Decimal("20"), quantity=0)
        record = invoice_record.model_copy(update={"line_items": (item,), "total_charge": None})

        dash = InvoiceLayout().build(record)
        assert dash.tables()[0].rows == (("Brake Check", "-", "RM20.00"),)
        assert dash.find_text("Total:").text == "Total: RM20.00"

        zero = InvoiceLayout(RenderSettings(quantity_zero_display=QuantityZeroDisplay.ZERO)).build(record)
        assert zero.tables()[0].rows[0][1] == "0"

    def test_legacy_order_bills_each_item_once(self):
        record = adapt_order({"id": "L1", "customer": "Tan", "total": 35,
                              "items": [{"name": "Oil Change", "price": 35, "quantity": 10, "type": "service"}]})
        plan = InvoiceLayout().build(record)

        assert plan.tables()[0].rows == (("Oil Change", "-", "RM35.00"),)
        assert plan.find_text("Total:").text == "Total: RM35.00"

    def test_price_column_shows_line_amount(self, invoice_record):
        item = LineItem(name="Spark Plug", unit_price=Decimal("12.50"), quantity=3)
        record = invoice_record.model_copy(update={"line_items": (item,), "total_charge": None})
        plan = InvoiceLayout().build(record)

        assert plan.tables()[0].rows == (("Spark Plug", "3", "RM37.50"),)

    def test_details_variant(self, invoice_record):
        items = (
            LineItem(name="Service A", details="Full synthetic", unit_price=Decimal("90")),
            LineItem(name="Service B", unit_price=Decimal("10")),
        )
        record = invoice_record.model_copy(update={"line_items": items, "total_charge": None})
        plan = InvoiceLayout(RenderSettings(invoice_variant=InvoiceVariant.DETAILS)).build(record)

        table = plan.tables()[0]
        assert table.header == ("Service", "Details", "Price")
        assert table.rows == (("Service A", "Full synthetic", "RM90.00"), ("Service B", "-", "RM10.00"))

    def test_supplied_total_is_printed(self, invoice_record):
        record = invoice_record.model_copy(update={"total_charge": Decimal("50")})
        plan = InvoiceLayout().build(record)

        assert plan.find_text("Total:").text == "Total: RM50.00"
        assert record.total_mismatch == Decimal("15.00")

    def test_long_names_wrap(self, invoice_record):
        item = LineItem(name="Full engine overhaul " * 8, unit_price=Decimal("900"))
        record = invoice_record.model_copy(update={"line_items": (item,), "total_charge": None})
        table = InvoiceLayout().build(record).tables()[0]

        assert "\n" in table.rows[0][0]
        assert table.row_heights[1] > line_height() + 8

    def test_watermark_is_drawn_first_on_every_page(self, invoice_record):
        record = invoice_record.model_copy(update={"line_items": _items(40), "total_charge": None})
        plan = InvoiceLayout().build(record)

        assert len(plan.pages) > 1
        for page in plan.pages:
            first = page.instructions[0]
            assert isinstance(first, ImageAt)
            assert first.asset == "watermark"
            assert first.width == 160
            assert first.x == pytest.approx(25)
            assert first.opacity == pytest.approx(0.08)

    def test_pagination(self, invoice_record):
        record = invoice_record.model_copy(update={"line_items": _items(40), "total_charge": None})
        plan = InvoiceLayout().build(record)
        tables = plan.tables()

        assert len(tables) > 1
        assert sum(len(t.rows) for t in tables) == 40
        assert all(t.bottom <= CONTENT_BOTTOM for t in tables)
        assert all(t.y == CONTINUATION_Y for t in tables[1:])
        assert all(t.header == tables[0].header for t in tables)
        assert plan.find_text("Total:").text == "Total: RM400.00"

        last = plan.pages[-1].instructions
        assert any(isinstance(i, TextAt) and i.text == "Customer Signature:" for i in last)
        for page in plan.pages[:-1]:
            assert not any(isinstance(i, (RectAt, LineAt)) for i in page.instructions)

    def test_footer(self, invoice_record):
        plan = InvoiceLayout().build(invoice_record)
        instructions = plan.pages[-1].instructions

        label = plan.find_text("Customer Signature:")
        assert (label.x, label.y) == (14, 257)
        line = next(i for i in instructions if isinstance(i, LineAt))
        assert (line.x1, line.y1, line.x2) == (14, 277, 80)
        stamp = next(i for i in instructions if isinstance(i, RectAt))
        assert (stamp.x, stamp.y, stamp.width, stamp.height) == (136, 247, 60, 30)

    def test_letterhead(self, invoice_record):
        plan = InvoiceLayout().build(invoice_record)
        logo = next(i for i in plan.pages[0].instructions if isinstance(i, ImageAt) and i.asset == "logo")
        assert (logo.x, logo.y, logo.width, logo.height) == (146, 14, 50, 20)

        address = [t for t in plan.texts() if t.align == "right" and t.size == 9]
        assert [t.y for t in address] == [39, 44, 49, 54, 59]
        assert address[0].text == "E-G-12, Pangsapuri Putra Raya"


class TestPayslipLayout:

    def test_payslip(self, payslip_record):
        plan = PayslipLayout().build(payslip_record)

        assert plan.filename_stem == "payslip-7-2025-01"
        assert plan.find_text("Payslip - 2025-01").bold
        assert plan.find_text("Employee:").text == "Employee: Alice"
        assert plan.find_text("Employee ID:").text == "Employee ID: 7"
        assert plan.tables()[0].header == ("Deduction", "Amount")
        assert plan.tables()[0].rows == (("EPF", "RM330.00"),)
        assert plan.find_text("Base Salary:").text == "Base Salary: RM3000.00"
        assert plan.find_text("Total Deductions:").text == "Total Deductions: RM330.00"

        net = plan.find_text("Net Salary:")
        assert net.text == "Net Salary: RM2670.00"
        assert net.bold
        assert plan.find_text("Employee Signature:").y == 257

    def test_negative_net_salary(self):
        record = PayslipRecord(employee_name="Bob", month="2025-02", base_salary=Decimal("100"),
                               deductions=({"title": "Advance", "amount": Decimal("250")},))
        plan = PayslipLayout().build(record)

        assert plan.find_text("Net Salary:").text == "Net Salary: RM-150.00"
        assert plan.filename_stem == "payslip-user-2025-02"

    def test_no_deductions(self, payslip_record):
        record = payslip_record.model_copy(update={"deductions": ()})
        plan = PayslipLayout(RenderSettings(address_lines=())).build(record)

        assert plan.tables()[0].rows == ()
        assert plan.tables()[0].y == MIN_TABLE_Y
        assert plan.find_text("Net Salary:").text == "Net Salary: RM3000.00"


class TestTaskListLayout:

    @pytest.fixture
    def task_list(self):
        return TaskList(orders=(
            TaskOrder(order_id="INV1", customer_name="Tan",
                      items=(TaskItem(name="Oil Change", done=True), TaskItem(name="Brake"))),
            TaskOrder(order_id="INV2"),
        ))

    def test_title(self, task_list):
        plan = TaskListLayout().build(task_list)

        title = plan.find_text("Mechanic Task List")
        assert (title.x, title.y) == (14, 20)
        assert title.size == 16
        assert title.bold
        assert plan.filename_stem == "tasks"

    def test_checklist_table(self, task_list):
        table = TaskListLayout().build(task_list).tables()[0]

        assert table.y == 30
        assert table.header == ("Customer", "Checklist")
        assert table.rows == (
            ("Tan", "[x] Oil Change\n\n[   ] Brake"),
            ("-", ""),
        )
        assert table.font_size == 18
        assert table.padding == 2
        assert table.valign == "top"

    def test_blank_line_between_tasks_adds_height(self, task_list):
        table = TaskListLayout().build(task_list).tables()[0]

        assert table.row_heights[1] == pytest.approx(3 * line_height(18) + 4, abs=0.01)
        assert table.row_heights[2] == pytest.approx(line_height(18) + 4, abs=0.01)

    def test_plain_pages(self, task_list):
        plan = TaskListLayout().build(task_list)

        assert not [i for page in plan.pages for i in page.instructions if isinstance(i, (ImageAt, LineAt))]
        with pytest.raises(KeyError):
            plan.find_text("Customer Signature:")

    def test_many_orders_paginate(self):
        orders = tuple(
            TaskOrder(customer_name=f"Customer {n}", items=(TaskItem(name="Oil Change"), TaskItem(name="Chain")))
            for n in range(20)
        )
        plan = TaskListLayout().build(TaskList(orders=orders))

        assert len(plan.pages) > 1
        assert sum(len(table.rows) for table in plan.tables()) == 20
        assert plan.tables()[1].y == CONTINUATION_Y
        assert len(plan.texts()) == 1
