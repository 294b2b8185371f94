from typing import Optional


class DocumentError(Exception):
    """Base exception for document rendering failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingRequiredFieldError(DocumentError):
    def __init__(self, field: str, record: str = "record"):
        super().__init__(f"The {record} is missing the required field '{field}'.")
        self.field = field


class AssetLoadError(DocumentError):
    """An image asset could not be loaded. Never fatal for a render."""

    def __init__(self, asset: str, reason: str):
        super().__init__(f"Could not load image asset '{asset}': {reason}")
        self.asset = asset


class DocumentGenerationError(DocumentError):
    status_code = 500

    def __init__(self, message: str, document_id: Optional[str] = None):
        super().__init__(message)
        self.document_id = document_id


class RecordFetchError(DocumentError):
    """The backend REST API did not return the requested record."""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        if upstream_status == 404:
            self.status_code = 404


class SalaryNotPublishedError(DocumentError):
    status_code = 403

    def __init__(self, employee_id: str):
        super().__init__("No published salary record available to download.")
        self.employee_id = employee_id
