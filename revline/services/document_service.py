import logging
import re
from typing import Any, Dict, Mapping, Optional

from flask import current_app
from PIL import Image
from pydantic import BaseModel

from revline.services.document_pdf.backends import get_backend
from revline.services.document_pdf.instructions import DocumentPlan
from revline.services.document_pdf.layout import DocumentLayout, InvoiceLayout, PayslipLayout, TaskListLayout
from revline.services.document_pdf.models import InvoiceRecord, OutputFormat, PayslipRecord, RenderSettings, TaskList
from revline.services.document_pdf.utils.asset_path import load_document_assets
from revline.services.exceptions import DocumentGenerationError, RecordFetchError, SalaryNotPublishedError
from revline.services.order_client import OrderClient
from revline.services.record_adapter import (
    adapt_order,
    find_salary_record,
    is_published,
    to_payslip_record,
    to_task_list,
)

logger = logging.getLogger(__name__)

# path separators, quotes and control characters
UNSAFE_FILENAME_CHARS = re.compile(r'[\\/\x00-\x1f\x7f"]')


def download_filename(stem: str, extension: str) -> str:
    name = UNSAFE_FILENAME_CHARS.sub("_", f"{stem}.{extension}").lstrip(". ")
    return name if name != extension else f"document.{extension}"


class RenderedDocument(BaseModel):
    filename: str
    media_type: str
    content: bytes


class DocumentService:

    @staticmethod
    def _render(layout: DocumentLayout, record, assets: Dict[str, Image.Image],
                output_format: OutputFormat, document_id: str) -> RenderedDocument:
        """Lay out and serialize in one go; nothing is returned unless both succeed."""
        backend = get_backend(output_format)
        try:
            plan: DocumentPlan = layout.build(record)
            content = backend.render(plan, assets)
        except Exception as e:
            logger.error(f"Failed to generate {backend.extension} document {document_id}: {e}", exc_info=True)
            raise DocumentGenerationError("Failed to generate document. Please try again.", document_id) from e

        filename = download_filename(plan.filename_stem, backend.extension)
        logger.info(f"Generated {filename} ({len(content)} bytes, {len(plan.pages)} page(s))")
        return RenderedDocument(filename=filename, media_type=backend.media_type, content=content)

    @staticmethod
    def render_invoice(record: InvoiceRecord, settings: RenderSettings, assets: Dict[str, Image.Image],
                       output_format: OutputFormat = OutputFormat.PDF) -> RenderedDocument:
        mismatch = record.total_mismatch
        if mismatch is not None:
            logger.warning(
                f"Invoice {record.invoice_id} total mismatch: supplied={record.total_charge}, "
                f"computed={record.computed_total}. Printing the supplied total."
            )
        return DocumentService._render(InvoiceLayout(settings), record, assets, output_format, record.invoice_id)

    @staticmethod
    def render_payslip(record: PayslipRecord, settings: RenderSettings, assets: Dict[str, Image.Image],
                       output_format: OutputFormat = OutputFormat.PDF) -> RenderedDocument:
        document_id = f"{record.employee_id}-{record.month}"
        return DocumentService._render(PayslipLayout(settings), record, assets, output_format, document_id)

    @staticmethod
    def render_task_list(task_list: TaskList, settings: RenderSettings,
                         output_format: OutputFormat = OutputFormat.PDF) -> RenderedDocument:
        return DocumentService._render(TaskListLayout(settings), task_list, {}, output_format, "tasks")

    # Request-scoped helpers: everything below reads the Flask app config once
    # and passes plain values down.

    @staticmethod
    def settings_from_app(**overrides) -> RenderSettings:
        return RenderSettings.from_config(current_app.config, **overrides)

    @staticmethod
    def assets_from_app() -> Dict[str, Image.Image]:
        config = current_app.config
        return load_document_assets(config['ASSET_FOLDER'], config.get('WATERMARK_IMAGE'), config.get('LOGO_IMAGE'))

    @staticmethod
    def client_from_app(token: Optional[str]) -> OrderClient:
        config = current_app.config
        return OrderClient(config['ORDER_API_URL'], token=token, timeout=config.get('ORDER_API_TIMEOUT', 10))

    @staticmethod
    def invoice_from_order(raw: Mapping[str, Any], output_format: OutputFormat,
                           variant: Optional[str] = None) -> RenderedDocument:
        settings = DocumentService.settings_from_app(invoice_variant=variant)
        record = adapt_order(raw, settings.display_timezone)
        return DocumentService.render_invoice(record, settings, DocumentService.assets_from_app(), output_format)

    @staticmethod
    def payslip_from_salary(raw: Mapping[str, Any], output_format: OutputFormat, month: Optional[str] = None,
                            employee_id: Optional[str] = None) -> RenderedDocument:
        settings = DocumentService.settings_from_app()
        record = to_payslip_record(raw, month=month, employee_id=employee_id, tz_name=settings.display_timezone)
        return DocumentService.render_payslip(record, settings, DocumentService.assets_from_app(), output_format)

    @staticmethod
    def task_list_from_orders(raw: Any, output_format: OutputFormat) -> RenderedDocument:
        task_list = to_task_list(raw)
        logger.info(f"Exporting task list for {len(task_list.orders)} order(s)")
        return DocumentService.render_task_list(task_list, DocumentService.settings_from_app(), output_format)

    @staticmethod
    def invoice_for_order_id(order_id: str, token: Optional[str], output_format: OutputFormat,
                             variant: Optional[str] = None) -> RenderedDocument:
        raw = DocumentService.client_from_app(token).get_order(order_id)
        return DocumentService.invoice_from_order(raw, output_format, variant)

    @staticmethod
    def payslip_for_employee(user_id: str, token: Optional[str], month: Optional[str],
                             output_format: OutputFormat) -> RenderedDocument:
        employees = DocumentService.client_from_app(token).get_employees()
        raw = find_salary_record(employees, user_id)
        if raw is None:
            raise RecordFetchError(f"No salary record found for employee {user_id}.", upstream_status=404)
        if not is_published(raw):
            raise SalaryNotPublishedError(str(user_id))
        return DocumentService.payslip_from_salary(raw, output_format, month=month, employee_id=str(user_id))
