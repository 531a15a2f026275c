"""Presentation-level operations using python-pptx.

Opening the source deck, picking the slide to render, reading the slide
size in points, and reducing an in-memory presentation to a single slide
so that a whole-document raster export renders just that slide.
"""

import logging
from pathlib import Path

from pptx import Presentation

from slide_overlay.pptx_engine.shape_reader import emu_to_points

logger = logging.getLogger(__name__)

_NS_R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"


def open_presentation(pptx_path: str | Path) -> Presentation:
    """Open a .pptx file for reading."""
    pptx_path = Path(pptx_path)
    if not pptx_path.exists():
        raise FileNotFoundError(f"Presentation not found: {pptx_path}")
    if pptx_path.suffix.lower() != ".pptx":
        raise ValueError(f"Expected a .pptx file, got: {pptx_path.suffix}")

    prs = Presentation(str(pptx_path))
    logger.info(
        f"Opened presentation: {pptx_path.name} "
        f"({prs.slide_width.inches:.2f}\"x{prs.slide_height.inches:.3f}\", "
        f"{len(prs.slides)} slides)"
    )
    return prs


def get_slide(prs: Presentation, slide_index: int):
    """Return the slide at a 0-based index."""
    slide_count = len(prs.slides)
    if not 0 <= slide_index < slide_count:
        raise IndexError(
            f"Slide index {slide_index} out of range (presentation has {slide_count} slides)"
        )
    return prs.slides[slide_index]


def get_slide_dimensions(prs: Presentation) -> tuple[float, float]:
    """Return (width, height) of the slides in points."""
    return (
        emu_to_points(prs.slide_width),
        emu_to_points(prs.slide_height),
    )


def isolate_slide(prs: Presentation, slide_index: int) -> None:
    """Remove every slide except ``slide_index`` from an in-memory presentation.

    Layouts, masters and the theme are kept, so the remaining slide renders
    exactly as before.
    """
    get_slide(prs, slide_index)

    slide_list = prs.slides._sldIdLst
    removed = 0
    for idx, sld_id in enumerate(list(slide_list)):
        if idx == slide_index:
            continue
        r_id = sld_id.get(f"{{{_NS_R}}}id")
        if r_id:
            prs.part.drop_rel(r_id)
        slide_list.remove(sld_id)
        removed += 1

    if removed:
        logger.debug(f"Isolated slide {slide_index} ({removed} other slides dropped)")
