"""HTML page template loading."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = Path(__file__).resolve().parent / "page.html"

REQUIRED_TOKENS = ("$$shapes$$",)


def load_template(path: str | Path | None = None) -> str:
    """Load a page template, defaulting to the packaged one.

    A custom template must contain at least the ``$$shapes$$`` token;
    ``$$width$$``, ``$$height$$`` and ``$$background$$`` are optional.
    """
    path = Path(path) if path else DEFAULT_TEMPLATE
    if not path.exists():
        raise FileNotFoundError(f"HTML template not found: {path}")

    template = path.read_text(encoding="utf-8")
    missing = [token for token in REQUIRED_TOKENS if token not in template]
    if missing:
        raise ValueError(f"Template {path} is missing placeholder(s): {', '.join(missing)}")

    logger.debug(f"Loaded HTML template: {path}")
    return template
