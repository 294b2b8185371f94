"""
Invoice model
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from .line_item import LineItem

CENT = Decimal("0.01")


class InvoiceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    invoice_id: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    phone_number: Optional[str] = None
    plate_number: Optional[str] = None
    mileage: Optional[str] = None
    motorcycle_name: Optional[str] = None
    mechanic_name: Optional[str] = None
    created_at: Optional[datetime] = None
    is_paid: bool = False
    line_items: Tuple[LineItem, ...] = ()
    total_charge: Optional[Decimal] = None

    @property
    def computed_total(self) -> Decimal:
        return sum((item.amount for item in self.line_items), Decimal("0")).quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def total(self) -> Decimal:
        """The charge printed on the invoice; derived from the line items when not supplied."""
        if self.total_charge is None:
            return self.computed_total
        return self.total_charge.quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def total_mismatch(self) -> Optional[Decimal]:
        """Supplied minus computed total when they differ by more than a cent."""
        if self.total_charge is None:
            return None
        difference = self.total_charge - self.computed_total
        if abs(difference) > CENT:
            return difference
        return None
