from .shape_schema import (
    VerticalAnchor, HorizontalAlignment, AutoSize, Hideable,
    ShapeGeometry, Margins, TextStyle, ShapeSnapshot, ShapeNode,
    InsertionPoint, CanvasContext,
)
from .render_config import RenderConfig

__all__ = [
    "VerticalAnchor",
    "HorizontalAlignment",
    "AutoSize",
    "Hideable",
    "ShapeGeometry",
    "Margins",
    "TextStyle",
    "ShapeSnapshot",
    "ShapeNode",
    "InsertionPoint",
    "CanvasContext",
    "RenderConfig",
]
