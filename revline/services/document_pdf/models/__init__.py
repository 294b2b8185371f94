"""
Data models for the document generator
"""

from .output_format import OutputFormat
from .line_item import LineItem
from .invoice import InvoiceRecord
from .payslip import Deduction, PayslipRecord
from .settings import InvoiceVariant, QuantityZeroDisplay, RenderSettings
from .task_list import TaskItem, TaskList, TaskOrder

__all__ = [
    "OutputFormat",
    "LineItem",
    "InvoiceRecord",
    "Deduction",
    "PayslipRecord",
    "InvoiceVariant",
    "QuantityZeroDisplay",
    "RenderSettings",
    "TaskItem",
    "TaskList",
    "TaskOrder",
]
