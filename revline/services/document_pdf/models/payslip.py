from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field

CENT = Decimal("0.01")


class Deduction(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = "-"
    amount: Decimal = Field(ge=0)


class PayslipRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_id: str = Field(default="user", min_length=1)
    employee_name: str = Field(min_length=1)
    month: str = Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    base_salary: Decimal = Field(ge=0)
    deductions: Tuple[Deduction, ...] = ()

    @property
    def total_deductions(self) -> Decimal:
        return sum((d.amount for d in self.deductions), Decimal("0")).quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def net_salary(self) -> Decimal:
        # Not clamped: deductions larger than the base salary print a negative net
        return (self.base_salary - self.total_deductions).quantize(CENT, rounding=ROUND_HALF_UP)
