"""Overlay Builder Agent: one slide to HTML + raster background.

For the selected slide:
1. Collect insertion points (shapes with ``{{...}}`` text).
2. Project them into an HTML page with pixel positions and CSS styling.
3. Hide them on an in-memory copy of the deck and export everything else
   as the PNG background.
4. Write a second HTML page with the PNG embedded as a data URI.

The source .pptx is never modified; the hidden copy only lives in a
temporary directory for the raster export.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from slide_overlay.markup.projector import SlideHtmlProjector
from slide_overlay.markup.templates import load_template
from slide_overlay.pptx_engine.background_export import (
    BackgroundExportError,
    background_data_url,
    background_url,
    export_slide_png,
)
from slide_overlay.pptx_engine.insertion_points import (
    collect_slide_insertion_points,
    hide_insertion_points,
)
from slide_overlay.pptx_engine.slide_operations import (
    get_slide,
    get_slide_dimensions,
    isolate_slide,
    open_presentation,
)
from slide_overlay.schemas.render_config import RenderConfig
from slide_overlay.schemas.shape_schema import InsertionPoint
from slide_overlay.utils.file_utils import ensure_directory, write_text

logger = logging.getLogger(__name__)


class RenderResult(BaseModel):
    """Files produced by one run."""

    html_path: Path
    embedded_html_path: Optional[Path] = None
    background_path: Optional[Path] = None
    insertion_point_count: int = 0
    slide_width: float
    slide_height: float


class OverlayBuilderAgent:
    """Render one slide of a .pptx as HTML insertion points over a PNG background."""

    def build(
        self,
        pptx_path: str | Path,
        output_dir: str | Path,
        config: RenderConfig | None = None,
    ) -> RenderResult:
        config = config or RenderConfig()
        output_dir = ensure_directory(output_dir)

        prs = open_presentation(pptx_path)
        slide_width, slide_height = get_slide_dimensions(prs)
        slide = get_slide(prs, config.slide_index)

        points = collect_slide_insertion_points(slide)

        projector = SlideHtmlProjector(
            load_template(config.template_path),
            config.canvas_width,
            config.canvas_height,
            slide_width,
            slide_height,
            strip_markers=config.strip_markers,
        )
        projector.add_shapes(points)

        # Markup is final here; hiding only touches the in-memory deck
        background_path = None
        embedded_html_path = None
        if config.export_background:
            background_path = self._export_background(prs, points, config, output_dir)
        else:
            logger.info("Background export disabled")

        html_path = write_text(
            output_dir / config.html_filename,
            projector.get_html_text(
                background_url(config.background_filename) if background_path is not None else None
            ),
        )
        logger.info(f"HTML page: {html_path} ({projector.element_count} insertion points)")

        if background_path is not None:
            embedded_html_path = write_text(
                output_dir / config.embedded_html_filename,
                projector.get_html_text(background_data_url(background_path.read_bytes())),
            )
            logger.info(f"HTML page with embedded background: {embedded_html_path}")

        return RenderResult(
            html_path=html_path,
            embedded_html_path=embedded_html_path,
            background_path=background_path,
            insertion_point_count=len(points),
            slide_width=slide_width,
            slide_height=slide_height,
        )

    # ------------------------------------------------------------------
    # Background
    # ------------------------------------------------------------------

    def _export_background(
        self,
        prs,
        points: list[InsertionPoint],
        config: RenderConfig,
        output_dir: Path,
    ) -> Path | None:
        """Hide the insertion points and rasterise what is left of the slide.

        Mutates ``prs`` in memory; it must not be saved over the source file.
        """
        hide_insertion_points(points)
        isolate_slide(prs, config.slide_index)

        png_path = output_dir / config.background_filename
        with tempfile.TemporaryDirectory(prefix="slide_overlay_") as tmpdir:
            hidden_pptx = Path(tmpdir) / "background.pptx"
            prs.save(str(hidden_pptx))
            try:
                return export_slide_png(
                    hidden_pptx,
                    png_path,
                    config.canvas_width,
                    config.canvas_height,
                    timeout=config.soffice_timeout,
                )
            except BackgroundExportError as e:
                if config.require_background:
                    raise
                logger.warning(f"Background not exported: {e}")
                return None
