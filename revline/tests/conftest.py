from datetime import datetime, timezone
from decimal import Decimal

import pytest
from PIL import Image

from revline.services.document_pdf.models import InvoiceRecord, LineItem, PayslipRecord, Deduction


@pytest.fixture
def order_raw():
    return {
        "invoiceNo": "INV1",
        "customerName": "Tan",
        "phoneNumber": "012-3456789",
        "plateNumber": "WXY 1234",
        "motorcycleName": "Yamaha Y15ZR",
        "mechanicName": "Ali",
        "mileage": 12000,
        "services": [{"name": "Oil Change", "price": 35, "quantity": 1}],
        "totalCharge": 35,
        "isPaid": True,
        "createAt": "2025-01-05T10:00:00Z",
    }


@pytest.fixture
def salary_raw():
    return {
        "userId": 7,
        "employeeName": "Alice",
        "baseSalary": 3000,
        "deductions": [{"title": "EPF", "amount": 330}],
        "isSalaryPublished": True,
    }


@pytest.fixture
def invoice_record():
    return InvoiceRecord(
        invoice_id="INV1",
        customer_name="Tan",
        phone_number="012-3456789",
        plate_number="WXY 1234",
        mileage="12000",
        motorcycle_name="Yamaha Y15ZR",
        mechanic_name="Ali",
        created_at=datetime(2025, 1, 5, 10, 0, tzinfo=timezone.utc),
        is_paid=True,
        line_items=(LineItem(name="Oil Change", unit_price=Decimal("35"), quantity=1),),
        total_charge=Decimal("35"),
    )


@pytest.fixture
def payslip_record():
    return PayslipRecord(
        employee_id="7",
        employee_name="Alice",
        month="2025-01",
        base_salary=Decimal("3000"),
        deductions=(Deduction(title="EPF", amount=Decimal("330")),),
    )


@pytest.fixture
def asset_folder(tmp_path):
    Image.new("RGBA", (200, 200), (200, 30, 30, 255)).save(tmp_path / "watermark.png")
    Image.new("RGB", (250, 100), (20, 20, 20)).save(tmp_path / "logo.png")
    return tmp_path


@pytest.fixture
def assets():
    return {
        "watermark": Image.new("RGBA", (200, 200), (200, 30, 30, 255)),
        "logo": Image.new("RGBA", (250, 100), (20, 20, 20, 255)),
    }
