"""Read a python-pptx slide into immutable shape snapshots.

Converts the slide's shape tree into ShapeNode entries (leaf / table /
group) whose geometry and text style are expressed in slide-space points.
Attributes that python-pptx does not expose (all caps, strikethrough,
group child transforms, theme colors) are read from the DrawingML XML with
lxml.

Nested groups are flattened: every shape inside a group, at any depth,
becomes one member of the top-level group node, positioned in slide space.

Reading never modifies the presentation.  python-pptx's ``Font`` and
``_Paragraph`` accessors add empty ``rPr`` / ``pPr`` elements on access, so
run and paragraph properties are read from the XML elements when present.
"""

import colorsys
import logging

from lxml import etree
from pptx.dml.color import RGBColor
from pptx.enum.dml import MSO_COLOR_TYPE
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.enum.text import MSO_ANCHOR, MSO_AUTO_SIZE, PP_ALIGN
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.text.text import Font
from pptx.util import Length

from slide_overlay.schemas.shape_schema import (
    AutoSize,
    HorizontalAlignment,
    Margins,
    ShapeGeometry,
    ShapeNode,
    ShapeSnapshot,
    TextStyle,
    VerticalAnchor,
)

logger = logging.getLogger(__name__)

_NS_A = "http://schemas.openxmlformats.org/drawingml/2006/main"
_NS_P = "http://schemas.openxmlformats.org/presentationml/2006/main"

EMU_PER_POINT = 12700

# DrawingML defaults applied when a value is inherited
DEFAULT_FONT_NAME = "Calibri"
DEFAULT_FONT_SIZE_PT = 18.0

_ANCHOR_MAP = {
    MSO_ANCHOR.TOP: VerticalAnchor.TOP,
    MSO_ANCHOR.MIDDLE: VerticalAnchor.MIDDLE,
    MSO_ANCHOR.BOTTOM: VerticalAnchor.BOTTOM,
    MSO_ANCHOR.MIXED: VerticalAnchor.MIXED,
}

_ALIGNMENT_MAP = {
    PP_ALIGN.LEFT: HorizontalAlignment.LEFT,
    PP_ALIGN.CENTER: HorizontalAlignment.CENTER,
    PP_ALIGN.RIGHT: HorizontalAlignment.RIGHT,
    PP_ALIGN.JUSTIFY: HorizontalAlignment.JUSTIFY,
    PP_ALIGN.JUSTIFY_LOW: HorizontalAlignment.JUSTIFY,
    PP_ALIGN.DISTRIBUTE: HorizontalAlignment.DISTRIBUTE,
    PP_ALIGN.THAI_DISTRIBUTE: HorizontalAlignment.DISTRIBUTE,
}

_AUTO_SIZE_MAP = {
    MSO_AUTO_SIZE.NONE: AutoSize.NONE,
    MSO_AUTO_SIZE.TEXT_TO_FIT_SHAPE: AutoSize.TEXT_TO_FIT_SHAPE,
    MSO_AUTO_SIZE.SHAPE_TO_FIT_TEXT: AutoSize.SHAPE_TO_FIT_TEXT,
    MSO_AUTO_SIZE.MIXED: AutoSize.MIXED,
}

ThemeColors = dict[str, tuple[int, int, int]]


def emu_to_points(value) -> float:
    """Convert an EMU length (or None) to points."""
    if value is None:
        return 0.0
    return int(value) / EMU_PER_POINT


# ---------------------------------------------------------------------------
# Hide handle
# ---------------------------------------------------------------------------

class TextFrameHandle:
    """Hide capability bound to a python-pptx text frame.

    Works for both autoshape text frames and table cell text frames.
    """

    def __init__(self, text_frame, name: str = ""):
        self._text_frame = text_frame
        self.name = name

    def set_transparent(self) -> None:
        """Make every run's text fill fully transparent (alpha 0)."""
        for para in self._text_frame.paragraphs:
            for run in para.runs:
                color = run.font.color
                try:
                    rgb = color.rgb if color.type == MSO_COLOR_TYPE.RGB else None
                except AttributeError:
                    rgb = None
                # Force an explicit srgbClr so the alpha has a host element
                color.rgb = rgb if rgb is not None else RGBColor(0, 0, 0)
                srgb = run.font._rPr.find(f"{{{_NS_A}}}solidFill/{{{_NS_A}}}srgbClr")
                if srgb is None:
                    continue
                for existing in srgb.findall(f"{{{_NS_A}}}alpha"):
                    srgb.remove(existing)
                alpha = etree.SubElement(srgb, f"{{{_NS_A}}}alpha")
                alpha.set("val", "0")

    def clear_text(self) -> None:
        """Remove all text, leaving a single empty paragraph."""
        self._text_frame.clear()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_slide_shapes(slide) -> list[ShapeNode]:
    """Convert a python-pptx slide's top-level shapes into ShapeNodes.

    Host order is preserved.  Tables become ``table`` nodes, groups become
    ``group`` nodes with all their (flattened) members, everything else a
    leaf.
    """
    theme = read_theme_colors(slide)
    nodes: list[ShapeNode] = []
    for shape in slide.shapes:
        if shape.has_table:
            nodes.append(ShapeNode.table(read_table_cells(shape, theme)))
        elif shape.shape_type == MSO_SHAPE_TYPE.GROUP:
            nodes.append(ShapeNode.group(read_group_members(shape, theme=theme)))
        else:
            nodes.append(ShapeNode.leaf(snapshot_shape(shape, theme=theme)))
    logger.debug(f"Read {len(nodes)} top-level shapes from slide")
    return nodes


def snapshot_shape(
    shape,
    geometry: ShapeGeometry | None = None,
    theme: ThemeColors | None = None,
) -> ShapeSnapshot:
    """Snapshot a single autoshape / textbox / picture / graphic frame."""
    if geometry is None:
        geometry = ShapeGeometry(
            left=emu_to_points(shape.left),
            top=emu_to_points(shape.top),
            width=emu_to_points(shape.width),
            height=emu_to_points(shape.height),
        )

    if not shape.has_text_frame:
        return ShapeSnapshot(name=shape.name, geometry=geometry)

    tf = shape.text_frame
    style = read_text_style(tf, theme=theme)
    return ShapeSnapshot(
        name=shape.name,
        geometry=geometry,
        style=style,
        text=tf.text,
        handle=TextFrameHandle(tf, shape.name),
    )


def read_group_members(group, to_parent=None, theme: ThemeColors | None = None) -> list[ShapeSnapshot]:
    """Snapshot every shape inside a group in slide space.

    Nested groups are descended into and their members appended in place,
    each group's child transform composed with its parent's.  ``to_parent``
    maps the group's own coordinate space to slide space (identity for a
    top-level group).
    """
    own = _group_transform(group)
    if to_parent is None:
        to_slide = own
    else:
        def to_slide(rect):
            return to_parent(own(rect))

    members: list[ShapeSnapshot] = []
    for member in group.shapes:
        if member.shape_type == MSO_SHAPE_TYPE.GROUP:
            members.extend(read_group_members(member, to_slide, theme))
            continue
        rect = to_slide((
            int(member.left or 0),
            int(member.top or 0),
            int(member.width or 0),
            int(member.height or 0),
        ))
        members.append(snapshot_shape(member, _rect_geometry(rect), theme))
    return members


def read_table_cells(graphic_frame, theme: ThemeColors | None = None) -> list[list[ShapeSnapshot]]:
    """Snapshot every visible cell of a table, row by row.

    Cells covered by a merge (spanned cells) are skipped; a merge-origin
    cell covers the combined extent of its span.
    """
    table = graphic_frame.table
    col_widths = [int(col.width) for col in table.columns]
    row_heights = [int(row.height) for row in table.rows]
    frame_left = int(graphic_frame.left or 0)
    frame_top = int(graphic_frame.top or 0)

    rows: list[list[ShapeSnapshot]] = []
    for r, row in enumerate(table.rows):
        cells: list[ShapeSnapshot] = []
        for c, cell in enumerate(row.cells):
            if cell.is_spanned:
                continue
            span_w = cell.span_width if cell.is_merge_origin else 1
            span_h = cell.span_height if cell.is_merge_origin else 1
            geometry = ShapeGeometry(
                left=emu_to_points(frame_left + sum(col_widths[:c])),
                top=emu_to_points(frame_top + sum(row_heights[:r])),
                width=emu_to_points(sum(col_widths[c:c + span_w])),
                height=emu_to_points(sum(row_heights[r:r + span_h])),
            )
            name = f"{graphic_frame.name} [{r + 1},{c + 1}]"
            tf = cell.text_frame
            style = read_text_style(
                tf,
                margins=Margins(
                    left=emu_to_points(cell.margin_left),
                    top=emu_to_points(cell.margin_top),
                    right=emu_to_points(cell.margin_right),
                    bottom=emu_to_points(cell.margin_bottom),
                ),
                vertical_anchor=cell.vertical_anchor,
                auto_size=MSO_AUTO_SIZE.NONE,
                word_wrap=True,
                theme=theme,
            )
            cells.append(ShapeSnapshot(
                name=name,
                geometry=geometry,
                style=style,
                text=tf.text,
                handle=TextFrameHandle(tf, name),
            ))
        rows.append(cells)
    return rows


# ---------------------------------------------------------------------------
# Theme colors
# ---------------------------------------------------------------------------

def read_theme_colors(slide) -> ThemeColors:
    """Map scheme color names to RGB for a slide.

    Covers the theme's own names (``dk1``, ``lt1``, ``accent1``, ...) and the
    aliases of the master's color map (``tx1``, ``bg1``, ...), with a
    slide-level ``clrMapOvr`` taking precedence.  Returns an empty dict
    when the theme cannot be read.
    """
    try:
        master = slide.slide_layout.slide_master
        theme_part = master.part.part_related_by(RT.THEME)
        theme_xml = etree.fromstring(theme_part.blob)
    except (AttributeError, KeyError, etree.XMLSyntaxError) as e:
        logger.debug(f"Could not read theme colors: {e}")
        return {}

    colors: ThemeColors = {}
    scheme = theme_xml.find(f"{{{_NS_A}}}themeElements/{{{_NS_A}}}clrScheme")
    if scheme is None:
        return colors

    for entry in scheme:
        name = etree.QName(entry).localname
        for color in entry:
            tag = etree.QName(color).localname
            value = color.get("val") if tag == "srgbClr" else color.get("lastClr") if tag == "sysClr" else None
            rgb = _parse_hex(value)
            if rgb is not None:
                colors[name] = rgb
                break

    clr_map = master._element.find(f"{{{_NS_P}}}clrMap")
    override = slide._element.find(f"{{{_NS_P}}}clrMapOvr/{{{_NS_A}}}overrideClrMapping")
    if override is not None:
        clr_map = override
    if clr_map is not None:
        for alias, target in clr_map.attrib.items():
            if target in colors:
                colors[alias] = colors[target]

    logger.debug(f"Resolved {len(colors)} theme colors")
    return colors


def _parse_hex(value: str | None) -> tuple[int, int, int] | None:
    if not value:
        return None
    try:
        rgb = RGBColor.from_string(value)
    except ValueError:
        return None
    return (rgb[0], rgb[1], rgb[2])


def _apply_luminance(rgb: tuple[int, int, int], color_elem) -> tuple[int, int, int]:
    """Apply ``lumMod`` / ``lumOff`` children of a color element (HSL lightness)."""
    lum_mod = color_elem.find(f"{{{_NS_A}}}lumMod")
    lum_off = color_elem.find(f"{{{_NS_A}}}lumOff")
    if lum_mod is None and lum_off is None:
        return rgb

    h, l, s = colorsys.rgb_to_hls(*(v / 255 for v in rgb))
    if lum_mod is not None:
        l *= int(lum_mod.get("val", "100000")) / 100000
    if lum_off is not None:
        l += int(lum_off.get("val", "0")) / 100000
    l = min(max(l, 0.0), 1.0)
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return (round(r * 255), round(g * 255), round(b * 255))


# ---------------------------------------------------------------------------
# Text style extraction
# ---------------------------------------------------------------------------

_UNSET = object()


def read_text_style(
    text_frame,
    margins: Margins | None = None,
    vertical_anchor=_UNSET,
    auto_size=_UNSET,
    word_wrap=_UNSET,
    theme: ThemeColors | None = None,
) -> TextStyle:
    """Build a TextStyle from a text frame's first paragraph and run.

    Frame-level values can be overridden by the caller (table cells keep
    their insets and anchor on the cell, not on the text body).  Scheme
    colors are resolved against ``theme``.
    """
    if margins is None:
        margins = Margins(
            left=emu_to_points(text_frame.margin_left),
            top=emu_to_points(text_frame.margin_top),
            right=emu_to_points(text_frame.margin_right),
            bottom=emu_to_points(text_frame.margin_bottom),
        )
    if vertical_anchor is _UNSET:
        vertical_anchor = text_frame.vertical_anchor
    if auto_size is _UNSET:
        auto_size = text_frame.auto_size
    if word_wrap is _UNSET:
        word_wrap = text_frame.word_wrap

    para = text_frame.paragraphs[0]
    pPr = para._p.pPr
    run = next((r for r in para.runs if r.text), para.runs[0] if para.runs else None)

    run_rPr = run._r.rPr if run is not None else None
    para_rPr = pPr.defRPr if pPr is not None else None
    run_font = Font(run_rPr) if run_rPr is not None else None
    para_font = Font(para_rPr) if para_rPr is not None else None

    font_name = _first_set(run_font, para_font, "name") or DEFAULT_FONT_NAME
    size = _first_set(run_font, para_font, "size")
    font_size = size.pt if size is not None else DEFAULT_FONT_SIZE_PT

    is_multiple, spacing = _line_spacing(pPr)

    return TextStyle(
        margins=margins,
        vertical_anchor=_ANCHOR_MAP.get(vertical_anchor, VerticalAnchor.TOP),
        alignment=_ALIGNMENT_MAP.get(pPr.algn if pPr is not None else None, HorizontalAlignment.LEFT),
        auto_size=_AUTO_SIZE_MAP.get(auto_size, AutoSize.NONE),
        word_wrap=word_wrap,
        font_name=font_name,
        font_size=font_size,
        italic=bool(_first_set(run_font, para_font, "italic")),
        bold=bool(_first_set(run_font, para_font, "bold")),
        all_caps=_rpr_attr(run_font, para_font, "cap") == "all",
        strikethrough=_rpr_attr(run_font, para_font, "strike") in ("sngStrike", "dblStrike"),
        underline=_first_set(run_font, para_font, "underline") not in (None, False),
        line_spacing_is_multiple=is_multiple,
        line_spacing=spacing,
        color=_font_color(run_font, para_font, theme or {}),
    )


def _first_set(run_font, para_font, attr: str):
    """Return the run-level value of a font attribute, else the paragraph default."""
    for font in (run_font, para_font):
        if font is None:
            continue
        value = getattr(font, attr)
        if value is not None:
            return value
    return None


def _rpr_attr(run_font, para_font, attr: str) -> str | None:
    """Read a raw rPr/defRPr attribute python-pptx does not wrap."""
    for font in (run_font, para_font):
        if font is None:
            continue
        value = font._rPr.get(attr)
        if value is not None:
            return value
    return None


def _line_spacing(pPr) -> tuple[bool, float]:
    """Return (is_multiple, value) for the paragraph line spacing.

    python-pptx reports a float for ``spcPct`` (multiple of a line) and a
    Length for ``spcPts`` (absolute).  Inherited spacing is single (1.0).
    """
    spacing = pPr.line_spacing if pPr is not None else None
    if spacing is None:
        return True, 1.0
    if isinstance(spacing, Length):
        return False, spacing.pt
    return True, float(spacing)


def _font_color(run_font, para_font, theme: ThemeColors) -> tuple[int, int, int]:
    """Solid text fill color, black when inherited or unresolvable.

    Read from the XML directly: ``Font.color`` converts the fill to solid
    on access, which would change how untouched shapes render.
    """
    for font in (run_font, para_font):
        if font is None:
            continue
        fill = font._rPr.find(f"{{{_NS_A}}}solidFill")
        if fill is None or len(fill) == 0:
            continue
        color = fill[0]
        tag = etree.QName(color).localname
        if tag == "srgbClr":
            rgb = _parse_hex(color.get("val"))
        elif tag == "schemeClr":
            rgb = theme.get(color.get("val", ""))
        else:
            rgb = None
        if rgb is None:
            logger.debug(f"Unresolved text color <{tag} val={color.get('val')}>")
            continue
        return _apply_luminance(rgb, color)
    return (0, 0, 0)


# ---------------------------------------------------------------------------
# Group transforms
# ---------------------------------------------------------------------------

def _rect_geometry(rect) -> ShapeGeometry:
    left, top, width, height = rect
    return ShapeGeometry(
        left=emu_to_points(round(left)),
        top=emu_to_points(round(top)),
        width=emu_to_points(round(width)),
        height=emu_to_points(round(height)),
    )


def _identity(rect):
    return rect


def _group_transform(group):
    """Return a function mapping a child EMU rect into the group's parent space.

    Group members are positioned in the group's child coordinate space
    (chOff/chExt), which is scaled onto the group's own off/ext.
    """
    xfrm = group._element.find(f"{{{_NS_P}}}grpSpPr/{{{_NS_A}}}xfrm")
    if xfrm is None:
        return _identity

    parts = {}
    for tag in ("off", "ext", "chOff", "chExt"):
        elem = xfrm.find(f"{{{_NS_A}}}{tag}")
        if elem is None:
            return _identity
        parts[tag] = elem

    try:
        off_x, off_y = int(parts["off"].get("x")), int(parts["off"].get("y"))
        ext_x, ext_y = int(parts["ext"].get("cx")), int(parts["ext"].get("cy"))
        ch_x, ch_y = int(parts["chOff"].get("x")), int(parts["chOff"].get("y"))
        ch_cx, ch_cy = int(parts["chExt"].get("cx")), int(parts["chExt"].get("cy"))
    except (TypeError, ValueError) as e:
        logger.debug(f"Unreadable group transform on '{group.name}': {e}")
        return _identity

    scale_x = ext_x / ch_cx if ch_cx else 1.0
    scale_y = ext_y / ch_cy if ch_cy else 1.0

    def to_parent(rect):
        left, top, width, height = rect
        return (
            off_x + (left - ch_x) * scale_x,
            off_y + (top - ch_y) * scale_y,
            width * scale_x,
            height * scale_y,
        )

    return to_parent
