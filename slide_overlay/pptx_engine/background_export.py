"""Raster background export for a single slide.

Uses LibreOffice headless to convert a presentation to PNG (LibreOffice
renders the first slide only, so callers isolate the slide beforehand),
then resizes the image to the exact canvas size with Pillow.

Requires LibreOffice to be installed and available as ``soffice`` on PATH
or in one of the common install locations.
"""

import base64
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)

_SOFFICE_CANDIDATES = (
    "soffice",
    "libreoffice",
    "/Applications/LibreOffice.app/Contents/MacOS/soffice",
    "/usr/bin/soffice",
    "/usr/local/bin/soffice",
)


class BackgroundExportError(RuntimeError):
    """Raised when the slide background could not be rasterised."""


def find_soffice() -> str | None:
    """Find the LibreOffice soffice binary."""
    for candidate in _SOFFICE_CANDIDATES:
        found = shutil.which(candidate)
        if found:
            return found
    return None


def export_slide_png(
    pptx_path: str | Path,
    png_path: str | Path,
    width: int,
    height: int,
    soffice: str | None = None,
    timeout: int = 120,
) -> Path:
    """Render the first slide of ``pptx_path`` to a ``width`` x ``height`` PNG."""
    pptx_path = Path(pptx_path)
    png_path = Path(png_path)
    soffice = soffice or find_soffice()
    if not soffice:
        raise BackgroundExportError("LibreOffice (soffice) not found")

    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)
        try:
            result = subprocess.run(
                [
                    soffice,
                    "--headless",
                    "--convert-to", "png",
                    "--outdir", str(tmpdir_path),
                    str(pptx_path),
                ],
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise BackgroundExportError(
                f"LibreOffice timed out converting {pptx_path}"
            ) from e
        except FileNotFoundError as e:
            raise BackgroundExportError(f"LibreOffice not found at {soffice}") from e

        if result.returncode != 0:
            raise BackgroundExportError(
                f"LibreOffice conversion failed for {pptx_path}: {result.stderr[:200]}"
            )

        pngs = sorted(tmpdir_path.glob("*.png"))
        if not pngs:
            raise BackgroundExportError(f"No PNG generated for {pptx_path}")

        png_path.parent.mkdir(parents=True, exist_ok=True)
        resize_png(pngs[0], png_path, width, height)

    logger.info(f"Exported background: {png_path} ({width}x{height}px)")
    return png_path


def resize_png(source: str | Path, dest: str | Path, width: int, height: int) -> Path:
    """Resize a PNG to exactly ``width`` x ``height`` (aspect ratio is not kept)."""
    dest = Path(dest)
    with Image.open(source) as img:
        if img.size != (width, height):
            logger.debug(f"Resizing {img.size[0]}x{img.size[1]} -> {width}x{height}")
            img = img.resize((width, height), Image.Resampling.LANCZOS)
        img.save(dest, format="PNG")
    return dest


def background_url(filename: str) -> str:
    """CSS background-image value referencing a file next to the HTML page."""
    return f"url({filename})"


def background_data_url(png_bytes: bytes) -> str:
    """CSS background-image value embedding a PNG as a base64 data URI."""
    image_data = base64.b64encode(png_bytes).decode("ascii")
    return f"url('data:image/png;base64,{image_data}')"
