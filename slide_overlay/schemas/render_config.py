"""Pydantic model for the slide rendering run configuration.

A RenderConfig captures everything one run needs besides the input file:
output canvas size, which slide to project, the page template, background
export behaviour, and output file names.  It can be loaded from / saved to
YAML so a run can be reproduced.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class RenderConfig(BaseModel):
    """Configuration for a single slide-to-HTML run."""

    canvas_width: int = Field(default=640, gt=0, description="Output canvas width in px")
    canvas_height: int = Field(default=360, gt=0, description="Output canvas height in px")
    slide_index: int = Field(default=0, ge=0, description="0-based index of the slide to render")

    template_path: Optional[str] = Field(
        default=None,
        description="Custom HTML page template. None = packaged default template.",
    )

    # --- background raster ---
    export_background: bool = Field(
        default=True,
        description="Export the slide (minus insertion points) as a PNG background",
    )
    require_background: bool = Field(
        default=False,
        description="Fail the run instead of skipping when the background cannot be exported",
    )
    soffice_timeout: int = Field(default=120, gt=0, description="LibreOffice timeout in seconds")

    # --- text ---
    strip_markers: bool = Field(
        default=False,
        description="Remove the '{{' / '}}' delimiters from rendered text (payload is kept)",
    )

    # --- output file names ---
    html_filename: str = "HtmlPage.html"
    embedded_html_filename: str = "HtmlPage2.html"
    background_filename: str = "Background.png"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RenderConfig":
        """Load a render configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Render config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """Save the render configuration to a YAML file."""
        path = Path(path)
        data = self.model_dump(exclude_none=True)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
