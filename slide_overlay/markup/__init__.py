from .projector import InvalidCanvasConfiguration, SlideHtmlProjector, format_number
from .templates import DEFAULT_TEMPLATE, load_template

__all__ = [
    "InvalidCanvasConfiguration",
    "SlideHtmlProjector",
    "format_number",
    "DEFAULT_TEMPLATE",
    "load_template",
]
