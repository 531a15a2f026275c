"""Project insertion points into absolute-positioned HTML.

The projector maps each insertion point's geometry and text style from
slide-space points onto a fixed pixel canvas and emits one
``<div class="shape">`` per point.  The page around it comes from a template
with these placeholder tokens:

    $$width$$, $$height$$   canvas size in px (substituted on construction)
    $$shapes$$              the accumulated shape elements
    $$background$$          a CSS background-image value, e.g. url(Background.png)

Horizontal and vertical scale factors are independent, so a slide whose
aspect ratio differs from the canvas is stretched, not letterboxed.
"""

import logging
from html import escape

from slide_overlay.pptx_engine.insertion_points import strip_markers as remove_markers
from slide_overlay.schemas.shape_schema import (
    AutoSize,
    CanvasContext,
    HorizontalAlignment,
    InsertionPoint,
    VerticalAnchor,
)

logger = logging.getLogger(__name__)

# CSS reference pixel: 1pt = 1/72in, 1px = 1/96in
PX_PER_INCH = 96
PT_PER_INCH = 72

_ALIGN_ITEMS = {
    VerticalAnchor.TOP: "flex-start",
    VerticalAnchor.MIDDLE: "center",
    VerticalAnchor.BOTTOM: "flex-end",
}

_JUSTIFY_CONTENT = {
    HorizontalAlignment.LEFT: "flex-start",
    HorizontalAlignment.CENTER: "center",
    HorizontalAlignment.RIGHT: "flex-end",
}


class InvalidCanvasConfiguration(ValueError):
    """Raised when the slide size makes coordinate scaling undefined."""


def _css_string(value: str) -> str:
    """Escape a value for a single-quoted CSS string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def format_number(value: float) -> str:
    """Format a CSS number with at most six decimals and no trailing zeros."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


class SlideHtmlProjector:
    """Accumulates insertion points as HTML elements for one slide.

    Not thread-safe: the element buffer is owned by the instance.
    """

    def __init__(
        self,
        template: str,
        canvas_width: int,
        canvas_height: int,
        slide_width: float,
        slide_height: float,
        strip_markers: bool = False,
    ):
        if slide_width <= 0 or slide_height <= 0:
            raise InvalidCanvasConfiguration(
                f"Slide dimensions must be positive, got {slide_width} x {slide_height}"
            )

        self.canvas = CanvasContext(
            canvas_width=canvas_width,
            canvas_height=canvas_height,
            slide_width=slide_width,
            slide_height=slide_height,
        )
        self.strip_markers = strip_markers
        self._template = (
            template
            .replace("$$width$$", str(canvas_width))
            .replace("$$height$$", str(canvas_height))
        )
        self._elements: list[str] = []

    # ------------------------------------------------------------------
    # Coordinate mapping
    # ------------------------------------------------------------------

    def to_pixels_x(self, value: float) -> int:
        return round(value * self.canvas.canvas_width / self.canvas.slide_width)

    def to_pixels_y(self, value: float) -> int:
        return round(value * self.canvas.canvas_height / self.canvas.slide_height)

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    @property
    def element_count(self) -> int:
        return len(self._elements)

    def add_shape(self, point: InsertionPoint) -> None:
        """Render one insertion point and append it to the buffer."""
        self._elements.append(self.render_element(point))
        logger.debug(f"Projected insertion point '{point.name}'")

    def add_shapes(self, points: list[InsertionPoint]) -> None:
        for point in points:
            self.add_shape(point)

    def get_html_text(self, background: str | None = None) -> str:
        """Return the full page with the shapes and background substituted.

        The buffer is only read, so this can be called repeatedly, e.g. once
        with a file reference and once with an embedded data URI.
        """
        return (
            self._template
            .replace("$$shapes$$", "".join(self._elements))
            .replace("$$background$$", background or "none")
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_element(self, point: InsertionPoint) -> str:
        """Render one insertion point as an outer positioned div + inner text div."""
        style = self.build_style(point)
        text = point.text.replace("\v", "\n")
        if self.strip_markers:
            text = remove_markers(text)
        return f'<div class="shape" style="{style}"><div>{escape(text)}</div></div>\n'

    def build_style(self, point: InsertionPoint) -> str:
        """Build the inline CSS declaration block for one insertion point."""
        geo = point.geometry
        style = point.style
        to_x = self.to_pixels_x
        to_y = self.to_pixels_y

        parts: list[str] = []

        # 1. Padding from the text frame insets
        m = style.margins
        parts.append(
            f"padding: {to_y(m.top)}px {to_x(m.right)}px {to_y(m.bottom)}px {to_x(m.left)}px"
        )

        # 2. Vertical anchor -> cross-axis alignment
        parts.append(f"align-items: {_ALIGN_ITEMS.get(style.vertical_anchor, 'flex-start')}")

        # 3. Horizontal alignment decides the anchor edge as well
        alignment = style.alignment
        if alignment not in _JUSTIFY_CONTENT:
            alignment = HorizontalAlignment.LEFT
        parts.append(f"justify-content: {_JUSTIFY_CONTENT[alignment]}")
        if alignment == HorizontalAlignment.CENTER:
            parts.append(f"left: {to_x(geo.center_x)}px")
            parts.append("text-align: center")
            parts.append("transform: translate(-50%, 0)")
        elif alignment == HorizontalAlignment.RIGHT:
            # Distance from the slide's right edge
            parts.append(f"right: {to_x(self.canvas.slide_width - geo.right)}px")
            parts.append("text-align: right")
        else:
            parts.append(f"left: {to_x(geo.left)}px")
            parts.append("text-align: left")

        # 4. Size; the autosize declarations come last and win
        parts.append(f"width: {to_x(geo.width)}px")
        parts.append(f"top: {to_y(geo.top)}px")
        if style.auto_size == AutoSize.SHAPE_TO_FIT_TEXT:
            parts.append("width: auto")
            parts.append("height: auto")
        else:
            # Shrinking text to fit is not implemented; keep the box size
            parts.append(f"width: {to_x(geo.width)}px")
            parts.append(f"height: {to_y(geo.height)}px")

        # 5. Word wrap (unspecified -> browser default)
        if style.word_wrap is True:
            parts.append("white-space: pre-wrap")
            parts.append("overflow-wrap: break-word")
        elif style.word_wrap is False:
            parts.append("white-space: pre")

        # 6. Typography; font size follows the horizontal fit
        font_px = style.font_size * self.canvas.canvas_width / self.canvas.slide_width
        parts.append(f"font-family: '{escape(_css_string(style.font_name))}'")
        parts.append(f"font-size: {format_number(font_px)}px")
        if style.italic:
            parts.append("font-style: italic")
        if style.bold:
            parts.append("font-weight: bold")
        if style.all_caps:
            parts.append("text-transform: uppercase")
        decorations = []
        if style.underline:
            decorations.append("underline")
        if style.strikethrough:
            decorations.append("line-through")
        if decorations:
            parts.append(f"text-decoration: {' '.join(decorations)}")

        # 7. Line height
        if style.line_spacing_is_multiple:
            if style.line_spacing != 1.0:
                parts.append(f"line-height: {format_number(style.line_spacing)}")
        else:
            pixels = style.line_spacing * PX_PER_INCH / PT_PER_INCH
            parts.append(f"line-height: {format_number(pixels)}px")

        # 8. Text color
        parts.append(f"color: {style.color_hex}")

        return "; ".join(parts) + ";"
