import logging

from flask import current_app
from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from revline.services.document_pdf.models import InvoiceVariant, OutputFormat
from revline.utils.timezone_utils import current_month

logger = logging.getLogger(__name__)

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class DocumentOptionsSchema(Schema):
    """Query args shared by every document download."""

    class Meta:
        unknown = EXCLUDE

    format = fields.Str(load_default=None, validate=validate.OneOf([f.value for f in OutputFormat]))


class InvoiceOptionsSchema(DocumentOptionsSchema):
    variant = fields.Str(load_default=None, validate=validate.OneOf([v.value for v in InvoiceVariant]))


class PayslipOptionsSchema(DocumentOptionsSchema):
    month = fields.Str(load_default=None,
                       validate=validate.Regexp(MONTH_PATTERN, error="Month must be in YYYY-MM format."))

    @post_load
    def clamp_future_month(self, data, **kwargs):
        """A month after the current one falls back to the current month."""
        month = data.get('month')
        if month is None:
            return data
        latest = current_month(current_app.config.get('DISPLAY_TIMEZONE'))
        if month > latest:
            logger.info(f"Requested payslip month {month} is in the future, using {latest}")
            data['month'] = latest
        return data
