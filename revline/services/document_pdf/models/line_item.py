from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=200)
    details: Optional[str] = None
    unit_price: Decimal = Field(ge=0)
    # 0 marks a catalog service with no tracked quantity; it is billed once
    quantity: int = Field(default=1, ge=0)

    @property
    def billable_quantity(self) -> int:
        return self.quantity or 1

    @property
    def amount(self) -> Decimal:
        return self.unit_price * self.billable_quantity
