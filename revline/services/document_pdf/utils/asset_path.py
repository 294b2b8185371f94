# revline/services/document_pdf/utils/asset_path.py
import os
import logging
from pathlib import Path
from typing import Dict, Optional

from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from revline.services.exceptions import AssetLoadError

logger = logging.getLogger(__name__)


class Asset:
    @staticmethod
    def safe_asset_path(asset_name: str | None, asset_folder: str) -> str | None:
        """Return absolute path to an image inside asset_folder, or None if invalid."""
        if not asset_name:
            return None

        filename = secure_filename(os.path.basename(asset_name))
        asset_dir = Path(asset_folder)

        abs_target_path = (asset_dir / filename).resolve()
        abs_asset_dir = asset_dir.resolve()

        # Path traversal protection
        try:
            abs_target_path.relative_to(abs_asset_dir)
        except ValueError:
            logger.warning("Attempted path traversal: %s", asset_name)
            return None

        if not abs_target_path.is_file():
            logger.warning("Asset file not found at %s", abs_target_path)
            return None

        return str(abs_target_path)

    @staticmethod
    def load_image(asset_name: str | None, asset_folder: str) -> Image.Image:
        """Open an image asset fully into memory as RGBA."""
        path = Asset.safe_asset_path(asset_name, asset_folder)
        if path is None:
            raise AssetLoadError(asset_name or "", "file is missing or outside the asset folder")
        try:
            with Image.open(path) as image:
                return image.convert("RGBA")
        except (OSError, UnidentifiedImageError) as e:
            raise AssetLoadError(asset_name, str(e)) from e


def with_opacity(image: Image.Image, opacity: float) -> Image.Image:
    """Copy of image with its alpha channel scaled by opacity."""
    if opacity >= 1:
        return image
    faded = image.convert("RGBA")
    alpha = faded.getchannel("A").point(lambda value: int(value * opacity))
    faded.putalpha(alpha)
    return faded


def load_document_assets(asset_folder: str, watermark: Optional[str], logo: Optional[str]) -> Dict[str, Image.Image]:
    """
    Load the images a document layout refers to, keyed by asset name.

    Missing or broken images are left out of the result; the backends skip
    image instructions whose asset is absent, so text still renders.
    """
    assets = {}
    for key, name in (("watermark", watermark), ("logo", logo)):
        try:
            assets[key] = Asset.load_image(name, asset_folder)
        except AssetLoadError as e:
            logger.warning(e.message)
    return assets
