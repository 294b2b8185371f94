"""
Pillow backend: rasterizes a DocumentPlan to a PNG, pages stacked top to bottom.
"""

import logging
from io import BytesIO
from typing import Dict

from PIL import Image, ImageDraw, ImageFont, ImageOps

from revline.services.document_pdf.instructions import DocumentPlan, ImageAt, LineAt, RectAt, TableAt, TextAt
from revline.services.document_pdf.utils.asset_path import with_opacity

logger = logging.getLogger(__name__)

POINT_IN_MM = 25.4 / 72
PAGE_GAP_PX = 24
STRIPE = (245, 245, 245)


class RasterBackend:
    extension = "png"
    media_type = "image/png"

    def __init__(self, dpi: int = 150):
        self.scale = dpi / 25.4
        self._fonts = {}

    def render(self, plan: DocumentPlan, assets: Dict[str, Image.Image]) -> bytes:
        pages = [self._render_page(plan, page.instructions, assets) for page in plan.pages]
        width, height = pages[0].size
        sheet = Image.new("RGB", (width, height * len(pages) + PAGE_GAP_PX * (len(pages) - 1)), (208, 208, 208))
        for index, page in enumerate(pages):
            sheet.paste(page, (0, index * (height + PAGE_GAP_PX)))

        buffer = BytesIO()
        sheet.save(buffer, format="PNG")
        return buffer.getvalue()

    def _px(self, value: float) -> int:
        return int(round(value * self.scale))

    def _font(self, size_pt: float):
        size = max(1, self._px(size_pt * POINT_IN_MM))
        if size not in self._fonts:
            self._fonts[size] = ImageFont.load_default(size=size)
        return self._fonts[size]

    def _render_page(self, plan: DocumentPlan, instructions, assets) -> Image.Image:
        page = Image.new("RGB", (self._px(plan.width), self._px(plan.height)), "white")
        draw = ImageDraw.Draw(page)
        for instruction in instructions:
            if isinstance(instruction, TextAt):
                self._text(draw, instruction.x, instruction.y, instruction.text, instruction.size,
                           instruction.align, instruction.bold)
            elif isinstance(instruction, ImageAt):
                self._image(page, instruction, assets)
            elif isinstance(instruction, RectAt):
                draw.rectangle(
                    [self._px(instruction.x), self._px(instruction.y),
                     self._px(instruction.x + instruction.width), self._px(instruction.y + instruction.height)],
                    outline="black", width=max(1, self._px(instruction.line_width)),
                )
            elif isinstance(instruction, LineAt):
                draw.line(
                    [self._px(instruction.x1), self._px(instruction.y1),
                     self._px(instruction.x2), self._px(instruction.y2)],
                    fill="black", width=max(1, self._px(instruction.line_width)),
                )
            elif isinstance(instruction, TableAt):
                self._table(draw, instruction)
        return page

    def _text(self, draw, x: float, baseline: float, text: str, size: float, align: str = "left",
              bold: bool = False, fill=(0, 0, 0)) -> None:
        font = self._font(size)
        width = draw.textlength(text, font=font)
        left = self._px(x)
        if align == "right":
            left -= width
        elif align == "center":
            left -= width / 2
        # approximate the ascent so y stays a baseline like in the PDF backend
        top = self._px(baseline - size * POINT_IN_MM * 0.8)
        draw.text((left, top), text, font=font, fill=fill, stroke_width=1 if bold else 0, stroke_fill=fill)

    def _image(self, page: Image.Image, image: ImageAt, assets) -> None:
        source = assets.get(image.asset)
        if source is None:
            logger.debug(f"Skipping image '{image.asset}': asset not loaded")
            return
        box = (self._px(image.width), self._px(image.height))
        fitted = with_opacity(ImageOps.contain(source.convert("RGBA"), box), image.opacity)
        left = self._px(image.x) + (self._px(image.width) - fitted.width) // 2
        top = self._px(image.y) + (self._px(image.height) - fitted.height) // 2
        page.paste(fitted, (left, top), fitted)

    def _table(self, draw, table: TableAt) -> None:
        line = table.font_size * 1.15 * POINT_IN_MM
        top = table.y
        for index, (cells, height) in enumerate(zip([table.header, *table.rows], table.row_heights)):
            if index == 0:
                fill = table.header_fill
            else:
                fill = STRIPE if index % 2 == 0 else (255, 255, 255)
            draw.rectangle([self._px(table.x), self._px(top), self._px(table.x + table.width), self._px(top + height)],
                           fill=fill)
            text_fill = (table.header_text,) * 3 if index == 0 else (0, 0, 0)

            left = table.x
            for cell, width, align in zip(cells, table.col_widths, table.col_align):
                lines = cell.split("\n")
                if table.valign == "top":
                    baseline = top + table.padding + line * 0.8
                else:
                    baseline = top + (height - len(lines) * line) / 2 + line * 0.8
                for text in lines:
                    if align == "right":
                        x = left + width - table.padding
                    elif align == "center":
                        x = left + width / 2
                    else:
                        x = left + table.padding
                    self._text(draw, x, baseline, text, table.font_size, align, bold=index == 0, fill=text_fill)
                    baseline += line
                left += width
            top += height
