"""Insertion point collection for a single slide.

An insertion point is any shape whose text contains a ``{{`` marker that
is followed by a ``}}`` marker, e.g. ``"Dear {{name}},"``.  Insertion
points are projected into HTML; everything else on the slide stays in the
raster background.

Note that insertion points are not PowerPoint placeholders: a placeholder
can carry an insertion point, but any text shape can.
"""

import logging

from slide_overlay.schemas.shape_schema import InsertionPoint, ShapeNode, ShapeSnapshot

logger = logging.getLogger(__name__)

OPEN_MARKER = "{{"
CLOSE_MARKER = "}}"


def collect_insertion_points(shapes: list[ShapeNode]) -> list[InsertionPoint]:
    """Flatten tables and groups and return the shapes holding a marker pair.

    Table cells are visited row by row; group members one level deep only.
    Host order is preserved.
    """
    collected: list[InsertionPoint] = []

    for node in shapes:
        if node.kind == "table":
            _collect_table_cells(node.rows, collected)
        elif node.kind == "group":
            _collect_group_members(node.members, collected)
        elif node.shape is not None and contains_insertion_point(node.shape):
            collected.append(InsertionPoint.from_snapshot(node.shape))

    logger.info(f"Collected {len(collected)} insertion points from {len(shapes)} shapes")
    return collected


def collect_slide_insertion_points(slide) -> list[InsertionPoint]:
    """Read a python-pptx slide and collect its insertion points."""
    from slide_overlay.pptx_engine.shape_reader import read_slide_shapes

    return collect_insertion_points(read_slide_shapes(slide))


def hide_insertion_points(points: list[InsertionPoint]) -> None:
    """Blank out insertion points on the host so a raster export omits them.

    Sets the text fill fully transparent and deletes the text, in place.
    """
    for point in points:
        if point.handle is None:
            logger.warning(f"Insertion point '{point.name}' has no host shape, not hidden")
            continue
        point.handle.set_transparent()
        point.handle.clear_text()
        logger.debug(f"Hid insertion point '{point.name}'")


def contains_insertion_point(shape: ShapeSnapshot) -> bool:
    """Return True if the shape's text has a ``{{`` before a ``}}``.

    Only the first occurrence of each marker is considered; the payload is
    neither validated nor extracted.
    """
    if not shape.has_text_frame:
        return False

    text = shape.text
    if not text:
        return False

    start = text.find(OPEN_MARKER)
    if start == -1:
        return False
    end = text.find(CLOSE_MARKER)
    if end == -1:
        return False
    return start < end


def strip_markers(text: str) -> str:
    """Remove the marker delimiters from a text, keeping the payload."""
    return text.replace(OPEN_MARKER, "").replace(CLOSE_MARKER, "")


def _collect_group_members(members: list[ShapeSnapshot], collected: list[InsertionPoint]) -> None:
    # Members arrive one level deep; nested groups are not descended into.
    for shape in members:
        if contains_insertion_point(shape):
            collected.append(InsertionPoint.from_snapshot(shape))


def _collect_table_cells(rows: list[list[ShapeSnapshot]], collected: list[InsertionPoint]) -> None:
    for row in rows:
        for cell in row:
            if contains_insertion_point(cell):
                collected.append(InsertionPoint.from_snapshot(cell))
