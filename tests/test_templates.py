"""Tests for HTML page template loading."""

import pytest


class TestLoadTemplate:
    def test_default_template(self):
        from slide_overlay.markup.templates import load_template

        template = load_template()
        for token in ("$$shapes$$", "$$width$$", "$$height$$", "$$background$$"):
            assert token in template

    def test_custom_template(self, tmp_path):
        from slide_overlay.markup.templates import load_template

        path = tmp_path / "page.html"
        path.write_text("<body>$$shapes$$</body>", encoding="utf-8")
        assert load_template(path) == "<body>$$shapes$$</body>"

    def test_missing_template(self, tmp_path):
        from slide_overlay.markup.templates import load_template

        with pytest.raises(FileNotFoundError, match="template not found"):
            load_template(tmp_path / "missing.html")

    def test_template_without_shapes_token(self, tmp_path):
        from slide_overlay.markup.templates import load_template

        path = tmp_path / "page.html"
        path.write_text("<body>$$background$$</body>", encoding="utf-8")
        with pytest.raises(ValueError, match="missing placeholder"):
            load_template(path)

    def test_default_template_renders(self):
        from slide_overlay.markup.projector import SlideHtmlProjector
        from slide_overlay.markup.templates import load_template

        projector = SlideHtmlProjector(load_template(), 640, 360, 720, 405)
        html = projector.get_html_text("url(Background.png)")
        assert "width: 640px" in html
        assert "height: 360px" in html
        assert "background-image: url(Background.png)" in html
        assert "$$" not in html
