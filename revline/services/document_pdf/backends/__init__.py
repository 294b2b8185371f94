"""
Output backends. Each executes a DocumentPlan against one output target.
"""

from typing import Dict, Protocol

from PIL import Image

from revline.services.document_pdf.instructions import DocumentPlan
from revline.services.document_pdf.models import OutputFormat

from .json_backend import JsonBackend
from .pdf_backend import PdfBackend
from .raster_backend import RasterBackend


class DocumentBackend(Protocol):
    extension: str
    media_type: str

    def render(self, plan: DocumentPlan, assets: Dict[str, Image.Image]) -> bytes:
        ...


BACKENDS = {
    OutputFormat.PDF: PdfBackend,
    OutputFormat.PNG: RasterBackend,
    OutputFormat.JSON: JsonBackend,
}


def get_backend(output_format: OutputFormat) -> DocumentBackend:
    return BACKENDS[OutputFormat(output_format)]()


__all__ = ["DocumentBackend", "JsonBackend", "PdfBackend", "RasterBackend", "get_backend"]
