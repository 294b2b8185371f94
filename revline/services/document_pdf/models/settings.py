"""
Render settings handed to the layout. Built once per request from app config so
the layout never reads configuration or storage on its own.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Mapping, Tuple
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ADDRESS_LINES = (
    "E-G-12, Pangsapuri Putra Raya",
    "Jalan PP 32, Seksyen 2",
    "Taman Pinggiran Putra",
    "43300 Seri Kembangan, Selangor",
    "Business Reg. No: 202503190421 (003752485-M)",
)


class InvoiceVariant(str, Enum):
    QUANTITY = "quantity"
    DETAILS = "details"


class QuantityZeroDisplay(str, Enum):
    DASH = "-"
    ZERO = "0"


class RenderSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency_prefix: str = "RM"
    display_timezone: str = "Asia/Kuala_Lumpur"
    address_lines: Tuple[str, ...] = DEFAULT_ADDRESS_LINES
    invoice_variant: InvoiceVariant = InvoiceVariant.QUANTITY
    quantity_zero_display: QuantityZeroDisplay = QuantityZeroDisplay.DASH
    show_payment_status: bool = True
    watermark_opacity: float = Field(default=0.08, ge=0, le=1)

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **overrides) -> "RenderSettings":
        values = {
            "currency_prefix": config.get("CURRENCY_PREFIX", "RM"),
            "display_timezone": config.get("DISPLAY_TIMEZONE", "Asia/Kuala_Lumpur"),
            "address_lines": tuple(config.get("SHOP_ADDRESS_LINES", DEFAULT_ADDRESS_LINES)),
            "invoice_variant": config.get("INVOICE_VARIANT", InvoiceVariant.QUANTITY),
            "quantity_zero_display": config.get("QUANTITY_ZERO_DISPLAY", QuantityZeroDisplay.DASH),
            "show_payment_status": config.get("SHOW_PAYMENT_STATUS", True),
            "watermark_opacity": config.get("WATERMARK_OPACITY", 0.08),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def money(self, value: Decimal) -> str:
        amount = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return f"{self.currency_prefix}{amount:.2f}"

    def quantity_label(self, quantity: int) -> str:
        if quantity > 0:
            return str(quantity)
        return self.quantity_zero_display.value
