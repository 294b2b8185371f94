"""
Normalizes order and salary JSON into the records the document layouts use.

Orders come in two shapes. Records saved by the old dashboard into local
storage use short keys (``customer``, ``bike``, ``items``, ``total``,
``paid``); records served by the REST backend use ``customerName``,
``motorcycleName``, ``services``, ``totalCharge``, ``isPaid``. Each shape is
its own payload model, and ``to_invoice_record`` is the only place that turns
either into an InvoiceRecord.
"""

import logging
from decimal import Decimal
from typing import Any, Iterable, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from revline.services.document_pdf.models import (
    Deduction,
    InvoiceRecord,
    LineItem,
    PayslipRecord,
    TaskItem,
    TaskList,
    TaskOrder,
)
from revline.services.exceptions import DocumentError, MissingRequiredFieldError
from revline.utils.timezone_utils import current_month, parse_datetime_string

logger = logging.getLogger(__name__)

CURRENT_ORDER_KEYS = frozenset({
    "customerName", "motorcycleName", "mechanicName", "phoneNumber", "plateNumber",
    "services", "totalCharge", "isPaid", "invoiceNo", "createAt",
})


class ServicePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    details: Optional[str] = None
    price: Optional[Decimal] = None
    quantity: Optional[int] = None


class _OrderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = None
    mileage: Optional[str] = None


class LegacyOrderPayload(_OrderPayload):
    source: Literal["legacy"] = "legacy"
    customer_name: Optional[str] = Field(None, alias="customer")
    phone_number: Optional[str] = Field(None, alias="phoneNo")
    plate_number: Optional[str] = Field(None, alias="platNo")
    motorcycle_name: Optional[str] = Field(None, alias="bike")
    mechanic_name: Optional[str] = Field(None, alias="mechanic")
    line_items: List[ServicePayload] = Field(default_factory=list, alias="items")
    total_charge: Optional[Decimal] = Field(None, alias="total")
    is_paid: Optional[bool] = Field(None, alias="paid")
    created_at: Optional[str] = Field(None, alias="createdAt")

    @property
    def document_id(self) -> Optional[str]:
        return self.id


class CurrentOrderPayload(_OrderPayload):
    source: Literal["current"] = "current"
    invoice_no: Optional[str] = Field(None, alias="invoiceNo")
    customer_name: Optional[str] = Field(None, alias="customerName")
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    plate_number: Optional[str] = Field(None, alias="plateNumber")
    motorcycle_name: Optional[str] = Field(None, alias="motorcycleName")
    mechanic_name: Optional[str] = Field(None, alias="mechanicName")
    line_items: List[ServicePayload] = Field(default_factory=list, alias="services")
    total_charge: Optional[Decimal] = Field(None, alias="totalCharge")
    is_paid: Optional[bool] = Field(None, alias="isPaid")
    created_at: Optional[str] = Field(None, validation_alias=AliasChoices("createAt", "createdAt"))

    @property
    def document_id(self) -> Optional[str]:
        return self.invoice_no or self.id


OrderPayload = Union[LegacyOrderPayload, CurrentOrderPayload]


def parse_order_payload(raw: Mapping[str, Any]) -> OrderPayload:
    """Tag a raw order as current (any REST-era key present) or legacy."""
    if not isinstance(raw, Mapping):
        raise DocumentError("Order record must be a JSON object.")
    if CURRENT_ORDER_KEYS & set(raw):
        return CurrentOrderPayload.model_validate(raw)
    return LegacyOrderPayload.model_validate(raw)


def _line_item(service: ServicePayload, billed_quantity: bool = True) -> LineItem:
    return LineItem(
        name=(service.name or "").strip() or "-",
        details=service.details or None,
        unit_price=service.price or Decimal("0"),
        quantity=(service.quantity or 0) if billed_quantity else 0,
    )


def _timestamp(value: Optional[str], tz_name: Optional[str]):
    try:
        return parse_datetime_string(value, tz_name)
    except ValueError:
        logger.warning(f"Unreadable order timestamp {value!r}, printing without a date")
        return None


def to_invoice_record(payload: OrderPayload, tz_name: Optional[str] = None) -> InvoiceRecord:
    if not isinstance(payload, (LegacyOrderPayload, CurrentOrderPayload)):
        raise TypeError(f"Unsupported order payload: {type(payload).__name__}")

    invoice_id = payload.document_id
    if not invoice_id:
        raise MissingRequiredFieldError("id", "order")
    customer = (payload.customer_name or "").strip()
    if not customer:
        raise MissingRequiredFieldError("customerName" if payload.source == "current" else "customer", "order")

    # legacy items are catalog copies; their quantity is the stock count, each was sold once
    billed = payload.source == "current"

    return InvoiceRecord(
        invoice_id=invoice_id,
        customer_name=customer,
        phone_number=payload.phone_number or None,
        plate_number=payload.plate_number or None,
        mileage=payload.mileage or None,
        motorcycle_name=payload.motorcycle_name or None,
        mechanic_name=payload.mechanic_name or None,
        created_at=_timestamp(payload.created_at, tz_name),
        is_paid=bool(payload.is_paid),
        line_items=tuple(_line_item(service, billed) for service in payload.line_items),
        total_charge=payload.total_charge,
    )


def adapt_order(raw: Mapping[str, Any], tz_name: Optional[str] = None) -> InvoiceRecord:
    return to_invoice_record(parse_order_payload(raw), tz_name)


class SalaryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    user_id: Optional[str] = Field(None, validation_alias=AliasChoices("userId", "employeeId", "id"))
    employee_name: Optional[str] = Field(None, validation_alias=AliasChoices("employeeName", "name"))
    username: Optional[str] = None
    email: Optional[str] = None
    base_salary: Optional[Decimal] = Field(None, validation_alias=AliasChoices("baseSalary", "base_salary"))
    deductions: Any = None
    published: Optional[bool] = Field(None, validation_alias=AliasChoices("isSalaryPublished", "published"))
    month: Optional[str] = None


def normalize_deductions(value: Any) -> Tuple[Deduction, ...]:
    """
    Deductions were stored as a list of {title, amount}, a list of bare
    amounts, or a single number. A single number becomes one "Other" line.
    """
    if value is None:
        return ()
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return (Deduction(title="Other", amount=value),)
    if not isinstance(value, list):
        raise DocumentError("Deductions must be a list or a number.")

    deductions = []
    for entry in value:
        if isinstance(entry, Mapping):
            deductions.append(Deduction(title=entry.get("title") or "-", amount=entry.get("amount") or 0))
        else:
            deductions.append(Deduction(title="-", amount=entry or 0))
    return tuple(deductions)


def to_payslip_record(raw: Mapping[str, Any], month: Optional[str] = None, employee_id: Optional[str] = None,
                      employee_name: Optional[str] = None, tz_name: Optional[str] = None) -> PayslipRecord:
    if not isinstance(raw, Mapping):
        raise DocumentError("Salary record must be a JSON object.")
    payload = SalaryPayload.model_validate(raw)

    name = employee_name or payload.employee_name or payload.username or payload.email
    if not name:
        raise MissingRequiredFieldError("employeeName", "salary record")

    return PayslipRecord(
        employee_id=employee_id or payload.user_id or "user",
        employee_name=name,
        month=month or payload.month or current_month(tz_name),
        base_salary=payload.base_salary or Decimal("0"),
        deductions=normalize_deductions(payload.deductions),
    )


def is_published(raw: Mapping[str, Any]) -> bool:
    return bool(SalaryPayload.model_validate(raw).published)


def find_salary_record(records: Iterable[Mapping[str, Any]], user_id: str) -> Optional[Mapping[str, Any]]:
    """Pick an employee's salary record by user id, username or email."""
    wanted = str(user_id)
    for record in records:
        if not isinstance(record, Mapping):
            continue
        keys = ("userId", "employeeId", "id", "username", "email")
        if any(record.get(key) is not None and str(record.get(key)) == wanted for key in keys):
            return record
    return None


class TaskServicePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    done: Optional[bool] = None


class TaskOrderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = None
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer: Optional[str] = None
    services: Optional[List[TaskServicePayload]] = None
    items: Optional[List[TaskServicePayload]] = None


def to_task_order(raw: Mapping[str, Any]) -> TaskOrder:
    """
    Either order shape works: the customer comes from ``customerName`` or
    ``customer``, the checklist from ``services`` or else ``items``.
    """
    if not isinstance(raw, Mapping):
        raise DocumentError("Each order must be a JSON object.")
    payload = TaskOrderPayload.model_validate(raw)

    services = payload.services if payload.services is not None else (payload.items or [])
    return TaskOrder(
        order_id=payload.id,
        customer_name=(payload.customer_name or payload.customer or "").strip() or "-",
        items=tuple(
            TaskItem(name=(service.name or "").strip() or "-", done=bool(service.done))
            for service in services
        ),
    )


def to_task_list(raw: Any) -> TaskList:
    """Accepts a list of orders or ``{"orders": [...]}``."""
    if isinstance(raw, Mapping):
        raw = raw.get("orders")
    if not isinstance(raw, list):
        raise DocumentError("Task list export needs a list of orders.")
    if not raw:
        raise DocumentError("Select at least one order to export.")
    return TaskList(orders=tuple(to_task_order(entry) for entry in raw))
