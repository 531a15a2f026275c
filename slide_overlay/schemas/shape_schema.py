"""Pydantic models for slide shape snapshots and insertion points.

The shape reader turns python-pptx shapes into these immutable snapshots
so that collection and projection never touch the host document directly.

All spatial values are slide-space points (1 pt = 12700 EMU), the same unit
the slide dimensions are expressed in.  Font sizes and absolute line
spacing are typographic points as well.
"""

from enum import Enum
from typing import Literal, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations mirrored from the DrawingML text body / paragraph model
# ---------------------------------------------------------------------------

class VerticalAnchor(str, Enum):
    """Vertical placement of text inside its frame."""

    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"
    MIXED = "mixed"


class HorizontalAlignment(str, Enum):
    """Paragraph alignment of the first paragraph of a text frame."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"
    DISTRIBUTE = "distribute"


class AutoSize(str, Enum):
    """Autofit policy of a text frame."""

    NONE = "none"
    TEXT_TO_FIT_SHAPE = "text_to_fit_shape"
    SHAPE_TO_FIT_TEXT = "shape_to_fit_text"
    MIXED = "mixed"


# ---------------------------------------------------------------------------
# Hide capability
# ---------------------------------------------------------------------------

@runtime_checkable
class Hideable(Protocol):
    """Mutation capability used to blank out a shape before raster export.

    Checked structurally: any object with both methods qualifies.
    """

    def set_transparent(self) -> None: ...

    def clear_text(self) -> None: ...


# ---------------------------------------------------------------------------
# Geometry / style snapshots
# ---------------------------------------------------------------------------

class ShapeGeometry(BaseModel):
    """Position and size of a shape in slide-space points.

    No clamping to the slide bounds: off-slide shapes pass through as-is.
    """

    model_config = ConfigDict(frozen=True)

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2


class Margins(BaseModel):
    """Internal text frame insets in points."""

    model_config = ConfigDict(frozen=True)

    left: float = 7.2
    top: float = 3.6
    right: float = 7.2
    bottom: float = 3.6


class TextStyle(BaseModel):
    """Text attributes of one shape needed to project it into CSS."""

    model_config = ConfigDict(frozen=True)

    margins: Margins = Field(default_factory=Margins)
    vertical_anchor: VerticalAnchor = VerticalAnchor.TOP
    alignment: HorizontalAlignment = HorizontalAlignment.LEFT
    auto_size: AutoSize = AutoSize.NONE
    word_wrap: Optional[bool] = Field(
        default=None,
        description="True = wrap, False = single line, None = unspecified",
    )

    font_name: str = "Calibri"
    font_size: float = Field(default=18.0, description="Font size in points")
    italic: bool = False
    bold: bool = False
    all_caps: bool = False
    strikethrough: bool = False
    underline: bool = False

    line_spacing_is_multiple: bool = Field(
        default=True,
        description="True: line_spacing is a factor of the line height; "
                    "False: line_spacing is an absolute value in points",
    )
    line_spacing: float = 1.0

    color: tuple[int, int, int] = Field(
        default=(0, 0, 0),
        description="Text fill color as an (r, g, b) triple",
    )

    @property
    def color_hex(self) -> str:
        r, g, b = self.color
        return f"#{r:02X}{g:02X}{b:02X}"


class ShapeSnapshot(BaseModel):
    """A single shape as seen by the collector.

    ``style`` is None when the shape has no text container at all.
    ``handle`` is the hide capability bound to the underlying host shape; it
    is never serialised.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = ""
    geometry: ShapeGeometry
    style: Optional[TextStyle] = None
    text: str = ""
    handle: Optional[Hideable] = Field(default=None, exclude=True, repr=False)

    @property
    def has_text_frame(self) -> bool:
        return self.style is not None


class ShapeNode(BaseModel):
    """One top-level entry of a slide's shape tree.

    A tagged variant: ``leaf`` carries ``shape``; ``table`` carries ``rows``
    (row-major cell snapshots); ``group`` carries its immediate ``members``.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["leaf", "table", "group"] = "leaf"
    shape: Optional[ShapeSnapshot] = None
    rows: list[list[ShapeSnapshot]] = Field(default_factory=list)
    members: list[ShapeSnapshot] = Field(default_factory=list)

    @classmethod
    def leaf(cls, shape: ShapeSnapshot) -> "ShapeNode":
        return cls(kind="leaf", shape=shape)

    @classmethod
    def table(cls, rows: list[list[ShapeSnapshot]]) -> "ShapeNode":
        return cls(kind="table", rows=rows)

    @classmethod
    def group(cls, members: list[ShapeSnapshot]) -> "ShapeNode":
        return cls(kind="group", members=members)


# ---------------------------------------------------------------------------
# Insertion point / canvas
# ---------------------------------------------------------------------------

class InsertionPoint(BaseModel):
    """A shape designated for HTML projection instead of rasterisation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = ""
    geometry: ShapeGeometry
    style: TextStyle
    text: str
    handle: Optional[Hideable] = Field(default=None, exclude=True, repr=False)

    @classmethod
    def from_snapshot(cls, shape: ShapeSnapshot) -> "InsertionPoint":
        return cls(
            name=shape.name,
            geometry=shape.geometry,
            style=shape.style,
            text=shape.text,
            handle=shape.handle,
        )


class CanvasContext(BaseModel):
    """Output canvas size in px and slide size in slide-space points.

    Slide dimensions must be strictly positive; the projector enforces it.
    """

    model_config = ConfigDict(frozen=True)

    canvas_width: int
    canvas_height: int
    slide_width: float
    slide_height: float

    @property
    def scale_x(self) -> float:
        return self.canvas_width / self.slide_width

    @property
    def scale_y(self) -> float:
        return self.canvas_height / self.slide_height
