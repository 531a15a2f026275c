#!/usr/bin/env python3
"""Render one slide of a PowerPoint file as HTML over a PNG background.

Shapes whose text contains an insertion point such as "{{name}}" become
absolute-positioned HTML elements; everything else on the slide is exported
as the background image.

Outputs (in the output directory):
    HtmlPage.html    page referencing Background.png
    Background.png   slide without the insertion points (needs LibreOffice)
    HtmlPage2.html   same page with the PNG embedded as a data URI

Usage:
    python scripts/render_slide.py Example.pptx -o workspace/slide \
        [--config render.yaml] [--slide 0] [--width 640 --height 360] \
        [--template my_template.html] [--no-background]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from slide_overlay.agents.overlay_builder import OverlayBuilderAgent
from slide_overlay.schemas.render_config import RenderConfig


def build_config(args: argparse.Namespace) -> RenderConfig:
    """Load the YAML config (if any) and apply command-line overrides."""
    config = RenderConfig.from_yaml(args.config) if args.config else RenderConfig()

    overrides = {}
    if args.slide is not None:
        overrides["slide_index"] = args.slide
    if args.width is not None:
        overrides["canvas_width"] = args.width
    if args.height is not None:
        overrides["canvas_height"] = args.height
    if args.template is not None:
        overrides["template_path"] = str(args.template)
    if args.no_background:
        overrides["export_background"] = False
    if args.strip_markers:
        overrides["strip_markers"] = True

    if overrides:
        config = RenderConfig.model_validate({**config.model_dump(), **overrides})
    return config


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Render a slide's insertion points as HTML")
    parser.add_argument("input_pptx", type=Path, help="Input .pptx file")
    parser.add_argument("-o", "--output-dir", type=Path, default=Path("workspace/slide_html"),
                        help="Output directory (default: workspace/slide_html)")
    parser.add_argument("--config", type=Path, default=None, help="Render config YAML path")
    parser.add_argument("--slide", type=int, default=None, help="0-based slide index")
    parser.add_argument("--width", type=int, default=None, help="Canvas width in px")
    parser.add_argument("--height", type=int, default=None, help="Canvas height in px")
    parser.add_argument("--template", type=Path, default=None, help="Custom HTML page template")
    parser.add_argument("--no-background", action="store_true",
                        help="Skip the PNG background export")
    parser.add_argument("--strip-markers", action="store_true",
                        help="Remove '{{' and '}}' from the rendered text")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if not args.input_pptx.exists():
        print(f"Error: Input not found: {args.input_pptx}", file=sys.stderr)
        return 1
    if args.config and not args.config.exists():
        print(f"Error: Config not found: {args.config}", file=sys.stderr)
        return 1

    config = build_config(args)
    result = OverlayBuilderAgent().build(args.input_pptx, args.output_dir, config)

    print(f"HTML page: {result.html_path}")
    if result.background_path:
        print(f"Background: {result.background_path}")
    if result.embedded_html_path:
        print(f"HTML page (embedded background): {result.embedded_html_path}")
    print(f"Insertion points: {result.insertion_point_count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
