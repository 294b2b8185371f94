import logging
from functools import wraps
from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file
from marshmallow import ValidationError
from pydantic import ValidationError as RecordValidationError

from revline.schemas.document_schema import DocumentOptionsSchema, InvoiceOptionsSchema, PayslipOptionsSchema
from revline.services.document_pdf.models import OutputFormat
from revline.services.document_service import DocumentService, RenderedDocument
from revline.services.exceptions import DocumentError

document_bp = Blueprint('document', __name__)
invoice_options_schema = InvoiceOptionsSchema()
payslip_options_schema = PayslipOptionsSchema()
task_options_schema = DocumentOptionsSchema()


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip() or None
    return None


def _output_format(options) -> OutputFormat:
    return OutputFormat(options.get('format') or current_app.config.get('DEFAULT_OUTPUT_FORMAT', 'pdf'))


def _json_body(allow_list=False):
    data = request.get_json(silent=True)
    if isinstance(data, dict) or (allow_list and isinstance(data, list)):
        return data
    if allow_list:
        raise DocumentError('Request body must be a JSON list or object.')
    raise DocumentError('Request body must be a JSON object.')


def _send(document: RenderedDocument):
    return send_file(
        BytesIO(document.content),
        mimetype=document.media_type,
        as_attachment=True,
        download_name=document.filename,
    )


def document_endpoint(view):
    """Map validation and document errors to JSON responses."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as ve:
            return jsonify({'error': 'Invalid request', 'details': ve.messages}), 400
        except RecordValidationError as rve:
            details = rve.errors(include_url=False, include_context=False, include_input=False)
            return jsonify({'error': 'Invalid record', 'details': details}), 400
        except DocumentError as de:
            return jsonify({'error': de.message}), de.status_code
        except Exception as e:
            logging.error(f"Unhandled error in {view.__name__}: {e}", exc_info=True)
            return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
    return wrapper


@document_bp.route('/documents/invoice', methods=['POST'])
@document_endpoint
def render_invoice():
    options = invoice_options_schema.load(request.args)
    document = DocumentService.invoice_from_order(_json_body(), _output_format(options), options.get('variant'))
    return _send(document)


@document_bp.route('/documents/payslip', methods=['POST'])
@document_endpoint
def render_payslip():
    options = payslip_options_schema.load(request.args)
    document = DocumentService.payslip_from_salary(_json_body(), _output_format(options), month=options.get('month'))
    return _send(document)


@document_bp.route('/documents/tasks', methods=['POST'])
@document_endpoint
def render_task_list():
    options = task_options_schema.load(request.args)
    document = DocumentService.task_list_from_orders(_json_body(allow_list=True), _output_format(options))
    return _send(document)


@document_bp.route('/orders/<order_id>/invoice', methods=['GET'])
@document_endpoint
def download_order_invoice(order_id):
    options = invoice_options_schema.load(request.args)
    document = DocumentService.invoice_for_order_id(order_id, _bearer_token(), _output_format(options),
                                                    options.get('variant'))
    return _send(document)


@document_bp.route('/employees/<user_id>/payslip', methods=['GET'])
@document_endpoint
def download_employee_payslip(user_id):
    options = payslip_options_schema.load(request.args)
    document = DocumentService.payslip_for_employee(user_id, _bearer_token(), options.get('month'),
                                                    _output_format(options))
    return _send(document)
