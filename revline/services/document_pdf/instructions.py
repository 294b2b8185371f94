"""
Declarative draw instructions.

Layouts describe a document as pages of instructions; backends execute them.
All coordinates are millimetres from the top-left corner of the page. Text
``y`` is the baseline, every other ``y`` is the top edge.
"""

from typing import Annotated, List, Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

Align = Literal["left", "center", "right"]


class TextAt(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["text"] = "text"
    x: float
    y: float
    text: str
    font: str = "Helvetica"
    size: float = 10
    align: Align = "left"

    @property
    def bold(self) -> bool:
        return self.font.endswith("-Bold")


class ImageAt(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["image"] = "image"
    asset: str
    x: float
    y: float
    width: float
    height: float
    opacity: float = Field(default=1.0, ge=0, le=1)


class RectAt(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["rect"] = "rect"
    x: float
    y: float
    width: float
    height: float
    line_width: float = 0.2


class LineAt(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["line"] = "line"
    x1: float
    y1: float
    x2: float
    y2: float
    line_width: float = 0.2


class TableAt(BaseModel):
    """A table chunk. ``row_heights`` starts with the header row."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["table"] = "table"
    x: float
    y: float
    col_widths: Tuple[float, ...]
    col_align: Tuple[Align, ...]
    header: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()
    row_heights: Tuple[float, ...]
    font_size: float = 10
    padding: float = 4
    valign: Literal["top", "middle"] = "middle"
    header_fill: Tuple[int, int, int] = (240, 240, 240)
    header_text: int = 20

    @property
    def width(self) -> float:
        return sum(self.col_widths)

    @property
    def height(self) -> float:
        return sum(self.row_heights)

    @property
    def bottom(self) -> float:
        return self.y + self.height


Instruction = Annotated[Union[TextAt, ImageAt, RectAt, LineAt, TableAt], Field(discriminator="kind")]


class Page(BaseModel):
    number: int
    instructions: List[Instruction] = Field(default_factory=list)


class DocumentPlan(BaseModel):
    title: str
    filename_stem: str
    width: float = 210
    height: float = 297
    pages: List[Page] = Field(default_factory=list)

    def texts(self) -> List[TextAt]:
        return [i for page in self.pages for i in page.instructions if isinstance(i, TextAt)]

    def tables(self) -> List[TableAt]:
        return [i for page in self.pages for i in page.instructions if isinstance(i, TableAt)]

    def find_text(self, prefix: str) -> TextAt:
        for text in self.texts():
            if text.text.startswith(prefix):
                return text
        raise KeyError(prefix)


class PlanBuilder:
    """Collects instructions page by page and hands back a DocumentPlan."""

    def __init__(self, title: str, filename_stem: str, width: float = 210, height: float = 297):
        self.plan = DocumentPlan(title=title, filename_stem=filename_stem, width=width, height=height)
        self.new_page()

    @property
    def page(self) -> Page:
        return self.plan.pages[-1]

    def new_page(self) -> Page:
        page = Page(number=len(self.plan.pages) + 1)
        self.plan.pages.append(page)
        return page

    def add(self, instruction) -> None:
        self.page.instructions.append(instruction)

    def text_at(self, x: float, y: float, text: str, font: str = "Helvetica", size: float = 10,
                align: Align = "left") -> TextAt:
        instruction = TextAt(x=x, y=y, text=text, font=font, size=size, align=align)
        self.add(instruction)
        return instruction

    def image_at(self, asset: str, x: float, y: float, width: float, height: float,
                 opacity: float = 1.0) -> ImageAt:
        instruction = ImageAt(asset=asset, x=x, y=y, width=width, height=height, opacity=opacity)
        self.add(instruction)
        return instruction

    def rect_at(self, x: float, y: float, width: float, height: float) -> RectAt:
        instruction = RectAt(x=x, y=y, width=width, height=height)
        self.add(instruction)
        return instruction

    def line_at(self, x1: float, y1: float, x2: float, y2: float) -> LineAt:
        instruction = LineAt(x1=x1, y1=y1, x2=x2, y2=y2)
        self.add(instruction)
        return instruction

    def table(self, **kwargs) -> TableAt:
        instruction = TableAt(**kwargs)
        self.add(instruction)
        return instruction

    def build(self) -> DocumentPlan:
        return self.plan
