"""File I/O and path utilities."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_directory(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_text(path: str | Path, text: str) -> Path:
    """Write UTF-8 text, creating parent directories as needed."""
    path = Path(path)
    ensure_directory(path.parent)
    path.write_text(text, encoding="utf-8")
    logger.debug(f"Wrote {len(text)} characters to {path}")
    return path
