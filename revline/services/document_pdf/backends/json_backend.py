import json
from typing import Dict

from PIL import Image

from revline.services.document_pdf.instructions import DocumentPlan


class JsonBackend:
    """Serializes the plan itself, for clients that lay the document out on their own."""

    extension = "json"
    media_type = "application/json"

    def render(self, plan: DocumentPlan, assets: Dict[str, Image.Image]) -> bytes:
        payload = plan.model_dump(mode="json")
        payload["assets"] = sorted(assets)
        return json.dumps(payload, indent=2).encode("utf-8")
